"""
Настройки приложения, загружаемые из переменных окружения.
"""

import logging
from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Настройки приложения."""

    # Настройки хранилища
    storage_backend: Literal["file", "database", "memory"] = Field(
        default="file",
        description="Хранилище записей: file, database или memory"
    )
    certificates_path: Path = Field(
        default=Path("./certificates"),
        description="Путь к директории сертификатов"
    )
    counter_file: Path = Field(
        default=Path("./certificates/.counter"),
        description="Файл счетчика ID сертификатов"
    )
    database_url: str = Field(
        default="sqlite:///./certificates.db",
        description="URL подключения к базе данных (SQLAlchemy)"
    )

    # Настройки сертификатов
    id_prefix: str = Field(default="CERT", description="Префикс ID сертификата")
    validation_url: str = Field(
        default="www.nuestroevento.com/validar",
        description="Адрес проверки сертификата, печатается в документе"
    )

    # Настройки логирования
    log_level: str = Field(default="INFO", description="Уровень логирования")
    log_file: Path = Field(
        default=Path("./logs/certificates.log"),
        description="Путь к файлу логов"
    )

    # Настройки приложения
    debug: bool = Field(default=False, description="Режим отладки")

    @validator('id_prefix')
    def validate_id_prefix(cls, v):
        """Префикс не может быть пустым и содержать дефис."""
        v = v.strip().upper()
        if not v or '-' in v:
            raise ValueError("Префикс ID должен быть непустым и без дефисов")
        return v

    @validator('log_level')
    def validate_log_level(cls, v):
        """Валидация уровня логирования."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Некорректный уровень логирования: {v}")
        return level

    def create_directories(self):
        """Создает необходимые директории."""
        if self.storage_backend == "file":
            self.certificates_path.mkdir(parents=True, exist_ok=True)
            self.counter_file.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Директория сертификатов: {self.certificates_path}")

        self.log_file.parent.mkdir(parents=True, exist_ok=True)

    class Config:
        """Конфигурация настроек."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Игнорировать дополнительные поля из .env


# Глобальная переменная с настройками, создается при первом обращении
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Возвращает объект настроек."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings



def load_settings_from_file(env_file: str = ".env") -> Settings:
    """
    Загружает настройки из указанного файла.

    Args:
        env_file: Путь к файлу с переменными окружения

    Returns:
        Settings: Объект настроек
    """
    return Settings(_env_file=env_file)
