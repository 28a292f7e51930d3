"""
Модели SQLAlchemy и хранилище сертификатов в базе данных.
"""

import asyncio
import logging
from typing import Optional, List
from sqlalchemy import (
    create_engine, Column, String, Integer, DateTime, Date,
    Float, LargeBinary, Index, text
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from .exceptions import PersistenceError
from .models import CertificateRecord
from .storage import KeyedStore, Counter

logger = logging.getLogger(__name__)

# Базовый класс для моделей
Base = declarative_base()


class CertificateRow(Base):
    """Таблица сертификатов, ключ - ID сертификата."""

    __tablename__ = "certificates"

    id = Column(String(64), primary_key=True)
    event_name = Column(String(255), nullable=False, index=True)
    event_date = Column(Date, nullable=False)
    event_location = Column(String(255), nullable=False)
    participant_name = Column(String(255), nullable=False, index=True)
    participant_role = Column(String(50), nullable=False)
    event_duration = Column(Float, nullable=False)
    document = Column(LargeBinary, nullable=False)
    created_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_certificate_created_at', 'created_at'),
    )

    def __repr__(self):
        return f"<CertificateRow(id={self.id}, participant={self.participant_name})>"


class CounterRow(Base):
    """Таблица именованных счетчиков."""

    __tablename__ = "counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)


class DatabaseManager:
    """Менеджер для работы с базой данных."""

    def __init__(self, database_url: str):
        """
        Инициализация менеджера БД.

        Args:
            database_url: URL подключения к БД
        """
        engine_kwargs = {"pool_pre_ping": True, "echo": False}
        if database_url.startswith("sqlite"):
            # Сессии открываются из рабочих потоков asyncio.to_thread
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(database_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_tables(self):
        """Создает все таблицы в базе данных."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Таблицы базы данных созданы")

    def get_session(self) -> Session:
        """Возвращает новую сессию для работы с БД."""
        return self.SessionLocal()

    def health_check(self) -> bool:
        """Проверяет подключение к базе данных."""
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(f"Ошибка подключения к БД: {e}")
            return False


class DatabaseStorage(KeyedStore):
    """Хранилище записей сертификатов в таблице certificates."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def put(self, record: CertificateRecord) -> None:
        await asyncio.to_thread(self._put, record)

    async def get(self, certificate_id: str) -> Optional[CertificateRecord]:
        return await asyncio.to_thread(self._get, certificate_id)

    async def get_all(self) -> List[CertificateRecord]:
        return await asyncio.to_thread(self._get_all)

    async def delete(self, certificate_id: str) -> None:
        await asyncio.to_thread(self._delete, certificate_id)

    def _put(self, record: CertificateRecord) -> None:
        try:
            with self.db_manager.get_session() as session:
                session.merge(CertificateRow(
                    id=record.id,
                    event_name=record.event_name,
                    event_date=record.event_date,
                    event_location=record.event_location,
                    participant_name=record.participant_name,
                    participant_role=record.participant_role,
                    event_duration=record.event_duration,
                    document=record.document,
                    created_at=record.created_at
                ))
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Ошибка сохранения сертификата {record.id}: {e}") from e

    def _get(self, certificate_id: str) -> Optional[CertificateRecord]:
        try:
            with self.db_manager.get_session() as session:
                row = session.get(CertificateRow, certificate_id)
                return CertificateRecord.model_validate(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Ошибка получения сертификата {certificate_id}: {e}") from e

    def _get_all(self) -> List[CertificateRecord]:
        try:
            with self.db_manager.get_session() as session:
                rows = session.query(CertificateRow).all()
                return [CertificateRecord.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Ошибка получения списка сертификатов: {e}") from e

    def _delete(self, certificate_id: str) -> None:
        try:
            with self.db_manager.get_session() as session:
                session.query(CertificateRow).filter(
                    CertificateRow.id == certificate_id
                ).delete()
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Ошибка удаления сертификата {certificate_id}: {e}") from e


class DatabaseCounter(Counter):
    """Именованный счетчик в таблице counters."""

    def __init__(self, db_manager: DatabaseManager, name: str = "certificate"):
        self.db_manager = db_manager
        self.name = name

    def next(self) -> int:
        """Чтение, увеличение и запись выполняются в одной транзакции."""
        try:
            with self.db_manager.get_session() as session:
                with session.begin():
                    row = session.get(CounterRow, self.name, with_for_update=True)
                    if row is None:
                        row = CounterRow(name=self.name, value=0)
                        session.add(row)
                    row.value += 1
                    value = row.value
                return value
        except SQLAlchemyError as e:
            raise PersistenceError(f"Ошибка обновления счетчика {self.name}: {e}") from e
