"""
Pydantic модели данных сертификатов участия.
"""

import base64
from datetime import datetime, date
from typing import Optional
from pydantic import BaseModel, Field, validator


DATE_FORMAT = "%d/%m/%Y"


def format_date(value: date) -> str:
    """Форматирует дату как DD/MM/YYYY."""
    return value.strftime(DATE_FORMAT)


class CertificateData(BaseModel):
    """Данные мероприятия и участника для формирования сертификата."""
    id: Optional[str] = Field(None, description="Уникальный ID сертификата")
    event_name: str = Field(..., min_length=1, description="Название мероприятия")
    event_date: date = Field(..., description="Дата мероприятия")
    event_location: str = Field(..., min_length=1, description="Место проведения")
    participant_name: str = Field(..., min_length=1, description="Имя участника")
    participant_role: str = Field(..., min_length=1, description="Роль участника")
    event_duration: float = Field(..., ge=0, allow_inf_nan=False, description="Продолжительность в часах")

    @validator('id')
    def validate_id(cls, v):
        """Пустая строка означает, что ID еще не назначен."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def duration_text(self) -> str:
        """Продолжительность в виде целого числа часов."""
        return str(int(self.event_duration))

    @property
    def event_date_text(self) -> str:
        """Дата мероприятия в формате DD/MM/YYYY."""
        return format_date(self.event_date)

    class Config:
        """Конфигурация модели."""
        json_schema_extra = {
            "example": {
                "id": "CERT-20240510-00001",
                "event_name": "Taller de Rust",
                "event_date": "2024-05-10",
                "event_location": "Lima",
                "participant_name": "Carlos Ruiz",
                "participant_role": "Ponente",
                "event_duration": 8
            }
        }


class CertificateRecord(CertificateData):
    """Сохраненная запись: данные сертификата, PDF документ и время создания."""
    id: str = Field(..., min_length=1, description="Уникальный ID сертификата")
    document: bytes = Field(..., description="PDF документ сертификата")
    created_at: datetime = Field(..., description="Дата создания записи")

    @property
    def data(self) -> CertificateData:
        """Возвращает данные сертификата без документа."""
        return CertificateData(**self.model_dump(exclude={'document', 'created_at'}))

    def to_dict(self) -> dict:
        """Конвертирует запись в словарь для JSON сериализации."""
        return {
            "id": self.id,
            "event_name": self.event_name,
            "event_date": self.event_date.isoformat(),
            "event_location": self.event_location,
            "participant_name": self.participant_name,
            "participant_role": self.participant_role,
            "event_duration": self.event_duration,
            "document": base64.b64encode(self.document).decode('ascii'),
            "created_at": self.created_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CertificateRecord":
        """Восстанавливает запись из словаря, созданного to_dict()."""
        fields = dict(data)
        fields['document'] = base64.b64decode(fields['document'])
        return cls(**fields)

    class Config:
        """Конфигурация модели."""
        from_attributes = True
