"""
Основная бизнес-логика для работы с записями сертификатов.
"""

import asyncio
import logging
from datetime import datetime, date
from typing import Callable, Iterable, List, Optional
from .composer import CertificateComposer
from .exceptions import PersistenceError
from .generator import CertificateIDGenerator
from .models import CertificateData, CertificateRecord
from .storage import KeyedStore, Counter, MemoryStorage, MemoryCounter, FileStorage, FileCounter

# Настройка логирования
logger = logging.getLogger(__name__)


def sort_newest_first(records: Iterable[CertificateRecord]) -> List[CertificateRecord]:
    """Сортирует записи по дате создания, сначала самые новые."""
    return sorted(records, key=lambda record: record.created_at, reverse=True)


def download_filename(record: CertificateRecord, extension: str = "pdf") -> str:
    """Имя файла для скачивания сертификата."""
    return f"Certificate_{record.id}.{extension}"


def matches(record: CertificateRecord, term: str) -> bool:
    """
    Проверяет вхождение строки поиска без учета регистра.

    Поиск идет по ID, имени участника, названию мероприятия
    и дате мероприятия в формате DD/MM/YYYY.
    """
    term = term.strip().lower()
    return (
        term in record.id.lower()
        or term in record.participant_name.lower()
        or term in record.event_name.lower()
        or term in record.event_date_text
    )


class CertificateService:
    """Хранилище записей сертификатов: ID, сохранение, поиск и удаление."""

    def __init__(self, store: KeyedStore, counter: Counter,
                 composer: Optional[CertificateComposer] = None,
                 id_prefix: str = "CERT",
                 clock: Callable[[], datetime] = datetime.now):
        """
        Инициализация сервиса.

        Args:
            store: Хранилище записей по ключу
            counter: Персистентный счетчик для ID
            composer: Формирователь PDF документа
            id_prefix: Префикс ID сертификатов
            clock: Источник текущего времени
        """
        self.store = store
        self.id_generator = CertificateIDGenerator(counter, id_prefix)
        self.clock = clock
        self.composer = composer or CertificateComposer(clock=lambda: self.clock().date())
        # Сохранение и выдача ID выполняются строго последовательно
        self._lock = asyncio.Lock()

    def generate_id(self, today: date) -> str:
        """
        Генерирует новый ID сертификата.

        Args:
            today: Текущая дата для сегмента YYYYMMDD

        Returns:
            str: ID формата CERT-YYYYMMDD-NNNNN
        """
        return self.id_generator.generate(today)

    async def save(self, data: CertificateData, document: bytes) -> CertificateRecord:
        """
        Сохраняет сертификат (создание или замена по ID).

        Args:
            data: Данные сертификата
            document: PDF документ

        Returns:
            CertificateRecord: Сохраненная запись

        Raises:
            PersistenceError: При ошибке хранилища
        """
        async with self._lock:
            return await self._save(data, document)

    async def issue(self, data: CertificateData, emblem: Optional[bytes] = None) -> CertificateRecord:
        """
        Выдает сертификат: назначает ID, формирует PDF и сохраняет запись.

        Args:
            data: Проверенные данные сертификата
            emblem: Байты изображения эмблемы (необязательно)

        Returns:
            CertificateRecord: Сохраненная запись

        Raises:
            RenderError: При ошибке формирования документа
            PersistenceError: При ошибке хранилища
        """
        async with self._lock:
            if not data.id:
                # ID нужен до формирования, он печатается в документе
                data = data.model_copy(update={"id": self.generate_id(self.clock().date())})

            document = self.composer.compose(data, emblem)
            return await self._save(data, document)

    async def get_all(self) -> List[CertificateRecord]:
        """Возвращает все сохраненные записи без гарантии порядка."""
        try:
            return await self.store.get_all()
        except PersistenceError as e:
            logger.error(f"Ошибка получения списка сертификатов: {e}")
            raise

    async def search(self, term: Optional[str] = None) -> List[CertificateRecord]:
        """
        Поиск сертификатов по подстроке.

        Args:
            term: Строка поиска, пустая строка возвращает все записи

        Returns:
            List[CertificateRecord]: Найденные записи
        """
        records = await self.get_all()

        if not term or not term.strip():
            return records

        found = [record for record in records if matches(record, term)]
        logger.info(f"Поиск '{term.strip()}': найдено сертификатов {len(found)}")
        return found

    async def get_by_id(self, certificate_id: str) -> Optional[CertificateRecord]:
        """
        Получает сертификат по ID.

        Returns:
            Optional[CertificateRecord]: Запись или None если не найдена
        """
        try:
            return await self.store.get(certificate_id)
        except PersistenceError as e:
            logger.error(f"Ошибка получения сертификата {certificate_id}: {e}")
            raise

    async def delete(self, certificate_id: str) -> bool:
        """
        Удаляет сертификат. Удаление несуществующего ID не является ошибкой.

        Returns:
            bool: True после успешного удаления
        """
        async with self._lock:
            try:
                await self.store.delete(certificate_id)
            except PersistenceError as e:
                logger.error(f"Ошибка удаления сертификата {certificate_id}: {e}")
                raise

        logger.info(f"Сертификат {certificate_id} удален")
        return True

    async def _save(self, data: CertificateData, document: bytes) -> CertificateRecord:
        certificate_id = data.id or self.generate_id(self.clock().date())

        try:
            existing = await self.store.get(certificate_id)
            created_at = existing.created_at if existing else self.clock()

            record = CertificateRecord(
                **data.model_dump(exclude={"id"}),
                id=certificate_id,
                document=document,
                created_at=created_at
            )
            await self.store.put(record)
        except PersistenceError as e:
            logger.error(f"Ошибка сохранения сертификата {certificate_id}: {e}")
            raise

        action = "обновлен" if existing else "создан"
        logger.info(f"Сертификат {certificate_id} {action} для {record.participant_name}")
        return record


def build_certificate_service(settings) -> CertificateService:
    """
    Создает сервис с хранилищем, выбранным в настройках.

    Args:
        settings: Объект настроек приложения

    Returns:
        CertificateService: Сервис сертификатов
    """
    composer = CertificateComposer(validation_url=settings.validation_url)

    if settings.storage_backend == "memory":
        store, counter = MemoryStorage(), MemoryCounter()
    elif settings.storage_backend == "database":
        from .database import DatabaseManager, DatabaseStorage, DatabaseCounter

        db_manager = DatabaseManager(settings.database_url)
        if not db_manager.health_check():
            raise PersistenceError(f"База данных недоступна: {settings.database_url}")
        db_manager.create_tables()
        store, counter = DatabaseStorage(db_manager), DatabaseCounter(db_manager)
    else:
        store = FileStorage(str(settings.certificates_path))
        counter = FileCounter(str(settings.counter_file))

    logger.info(f"Хранилище сертификатов: {settings.storage_backend}")
    return CertificateService(store, counter, composer=composer, id_prefix=settings.id_prefix)

