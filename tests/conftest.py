"""
Общие фикстуры для тестов
"""
import pytest
from datetime import date, datetime, timedelta
from io import BytesIO

from PIL import Image

from core.composer import CertificateComposer
from core.models import CertificateData
from core.service import CertificateService
from core.storage import MemoryStorage, MemoryCounter


class FixedClock:
    """Управляемый источник времени"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def tick(self, minutes: int = 1):
        self.now += timedelta(minutes=minutes)


@pytest.fixture
def sample_data():
    """Образец данных сертификата для тестов"""
    return CertificateData(
        event_name="Taller de Rust",
        event_date=date(2024, 5, 10),
        event_location="Lima",
        participant_name="Carlos Ruiz",
        participant_role="Ponente",
        event_duration=8
    )


@pytest.fixture
def clock():
    """Фиксированное текущее время"""
    return FixedClock(datetime(2026, 10, 16, 12, 0, 0))


@pytest.fixture
def composer():
    """Формирователь с фиксированной датой выдачи"""
    return CertificateComposer(clock=lambda: date(2026, 10, 16))


@pytest.fixture
def service(clock):
    """Сервис сертификатов с хранилищем в памяти"""
    return CertificateService(MemoryStorage(), MemoryCounter(), clock=clock)


def make_png(width: int, height: int) -> bytes:
    """PNG изображение заданного размера"""
    buffer = BytesIO()
    Image.new("RGBA", (width, height), (0, 110, 253, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_emblem():
    """Широкая эмблема 200x50 пикселей"""
    return make_png(200, 50)


@pytest.fixture
def png_factory():
    """Фабрика PNG изображений произвольного размера"""
    return make_png
