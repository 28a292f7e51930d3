"""
Модуль для работы с хранилищем записей сертификатов и счетчиком ID
"""
import asyncio
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote

from .exceptions import PersistenceError
from .models import CertificateRecord

logger = logging.getLogger(__name__)


class KeyedStore(ABC):
    """Асинхронное хранилище записей по первичному ключу (ID сертификата)"""

    @abstractmethod
    async def put(self, record: CertificateRecord) -> None:
        """Сохраняет или заменяет запись с тем же ID"""

    @abstractmethod
    async def get(self, certificate_id: str) -> Optional[CertificateRecord]:
        """Возвращает запись или None"""

    @abstractmethod
    async def get_all(self) -> List[CertificateRecord]:
        """Возвращает все записи без гарантии порядка"""

    @abstractmethod
    async def delete(self, certificate_id: str) -> None:
        """Удаляет запись, отсутствие записи не является ошибкой"""


class Counter(ABC):
    """Персистентный монотонный счетчик"""

    @abstractmethod
    def next(self) -> int:
        """Увеличивает счетчик и возвращает новое значение"""


class MemoryStorage(KeyedStore):
    """Хранилище записей в памяти процесса"""

    def __init__(self):
        self._records: Dict[str, CertificateRecord] = {}

    async def put(self, record: CertificateRecord) -> None:
        self._records[record.id] = record.model_copy()

    async def get(self, certificate_id: str) -> Optional[CertificateRecord]:
        record = self._records.get(certificate_id)
        return record.model_copy() if record else None

    async def get_all(self) -> List[CertificateRecord]:
        return [record.model_copy() for record in self._records.values()]

    async def delete(self, certificate_id: str) -> None:
        self._records.pop(certificate_id, None)


class MemoryCounter(Counter):
    """Счетчик в памяти процесса"""

    def __init__(self, start: int = 0):
        self.value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self.value += 1
            return self.value


def write_atomic(path: Path, content: str) -> None:
    """
    Атомарная запись текстового файла: временный файл + замена

    Args:
        path: Путь к итоговому файлу
        content: Содержимое файла
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class FileStorage(KeyedStore):
    """Класс для работы с файловым хранилищем: один JSON файл на сертификат"""

    def __init__(self, base_path: str = "certificates"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, certificate_id: str) -> Path:
        # ID может содержать символы, недопустимые в имени файла
        return self.base_path / f"{quote(certificate_id, safe='')}.json"

    async def put(self, record: CertificateRecord) -> None:
        """
        Сохранение сертификата в файл

        Args:
            record: Запись сертификата

        Raises:
            PersistenceError: При ошибке записи
        """
        content = json.dumps(record.to_dict(), ensure_ascii=False, indent=2)
        try:
            await asyncio.to_thread(write_atomic, self._path_for(record.id), content)
        except OSError as e:
            raise PersistenceError(f"Ошибка сохранения файла сертификата {record.id}: {e}") from e

    async def get(self, certificate_id: str) -> Optional[CertificateRecord]:
        """
        Загрузка сертификата из файла

        Args:
            certificate_id: ID сертификата

        Returns:
            Запись сертификата или None если не найдена
        """
        return await asyncio.to_thread(self._load, self._path_for(certificate_id))

    async def get_all(self) -> List[CertificateRecord]:
        return await asyncio.to_thread(self._load_all)

    async def delete(self, certificate_id: str) -> None:
        await asyncio.to_thread(self._delete, certificate_id)

    def _delete(self, certificate_id: str) -> None:
        try:
            self._path_for(certificate_id).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Ошибка удаления файла сертификата {certificate_id}: {e}") from e

    def _load(self, file_path: Path) -> Optional[CertificateRecord]:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return CertificateRecord.from_dict(data)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Ошибка чтения файла {file_path.name}: {e}") from e

    def _load_all(self) -> List[CertificateRecord]:
        records = [self._load(file_path) for file_path in sorted(self.base_path.glob("*.json"))]
        # Файл мог быть удален между glob и чтением
        return [record for record in records if record is not None]


class FileCounter(Counter):
    """Счетчик, хранящийся в текстовом файле"""

    def __init__(self, path: str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def read(self) -> int:
        """Текущее значение счетчика (0 если файла нет)"""
        if not self.path.exists():
            return 0
        try:
            return int(self.path.read_text(encoding='utf-8').strip() or 0)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Ошибка чтения счетчика {self.path}: {e}") from e

    def next(self) -> int:
        with self._lock:
            value = self.read() + 1
            try:
                write_atomic(self.path, str(value))
            except OSError as e:
                raise PersistenceError(f"Ошибка записи счетчика {self.path}: {e}") from e
            logger.debug(f"Счетчик {self.path} увеличен до {value}")
            return value
