"""
Модуль валидации входных данных для сертификатов.
"""

import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
from .exceptions import ValidationError
from .models import CertificateData


REQUIRED_FIELDS = {
    "event_name": "Nombre del evento",
    "event_date": "Fecha del evento",
    "event_location": "Lugar",
    "participant_name": "Nombre del participante",
    "participant_role": "Rol del participante",
    "event_duration": "Duración (horas)",
}


class RequiredFieldValidator:
    """Валидатор обязательных полей формы."""

    def validate(self, value: Any) -> bool:
        """
        Проверяет, что значение заполнено.

        Args:
            value: Значение поля

        Returns:
            bool: True если значение не пустое
        """
        if value is None:
            return False
        if isinstance(value, str):
            return bool(value.strip())
        return True


class EventDateValidator:
    """Валидатор даты мероприятия."""

    def parse(self, value: Any) -> Tuple[Optional[date], str]:
        """
        Парсинг даты в формате YYYY-MM-DD.

        Returns:
            Tuple[Optional[date], str]: (дата, сообщение об ошибке)
        """
        if isinstance(value, datetime):
            return value.date(), ""
        if isinstance(value, date):
            return value, ""

        try:
            return datetime.strptime(str(value).strip(), "%Y-%m-%d").date(), ""
        except ValueError:
            return None, f"Fecha no válida (use AAAA-MM-DD): {value}"


class DurationValidator:
    """Валидатор продолжительности мероприятия в часах."""

    def parse(self, value: Any) -> Tuple[Optional[float], str]:
        """
        Парсинг неотрицательного числа часов.

        Returns:
            Tuple[Optional[float], str]: (число часов, сообщение об ошибке)
        """
        if isinstance(value, bool):
            return None, f"Duración no válida: {value}"

        try:
            hours = float(str(value).strip().replace(",", "."))
        except ValueError:
            return None, f"Duración no válida: {value}"

        if not math.isfinite(hours):
            return None, f"Duración no válida: {value}"
        if hours < 0:
            return None, f"La duración no puede ser negativa: {value}"
        return hours, ""


class DataValidator:
    """Общий валидатор данных сертификата."""

    def __init__(self):
        self.required_validator = RequiredFieldValidator()
        self.date_validator = EventDateValidator()
        self.duration_validator = DurationValidator()

    def validate_all(self, raw: Dict[str, Any]) -> List[str]:
        """
        Валидация всех данных сертификата.

        Args:
            raw: Значения полей формы

        Returns:
            List[str]: Список ошибок валидации (пустой если все в порядке)
        """
        errors = []

        for field, label in REQUIRED_FIELDS.items():
            if not self.required_validator.validate(raw.get(field)):
                errors.append(f"Campo obligatorio: {label}")

        if self.required_validator.validate(raw.get("event_date")):
            _, date_error = self.date_validator.parse(raw["event_date"])
            if date_error:
                errors.append(date_error)

        if self.required_validator.validate(raw.get("event_duration")):
            _, duration_error = self.duration_validator.parse(raw["event_duration"])
            if duration_error:
                errors.append(duration_error)

        return errors

    def parse(self, raw: Dict[str, Any]) -> CertificateData:
        """
        Проверяет и преобразует значения формы в CertificateData.

        Raises:
            ValidationError: Со списком всех найденных ошибок
        """
        errors = self.validate_all(raw)
        if errors:
            raise ValidationError("; ".join(errors))

        event_date, _ = self.date_validator.parse(raw["event_date"])
        duration, _ = self.duration_validator.parse(raw["event_duration"])

        return CertificateData(
            id=raw.get("id") or None,
            event_name=raw["event_name"].strip(),
            event_date=event_date,
            event_location=raw["event_location"].strip(),
            participant_name=raw["participant_name"].strip(),
            participant_role=raw["participant_role"].strip(),
            event_duration=duration
        )
