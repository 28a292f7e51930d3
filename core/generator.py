"""
Генератор уникальных номеров сертификатов.
"""

import re
from datetime import date, datetime
from .storage import Counter


class CertificateIDGenerator:
    """Генератор ID сертификатов на основе персистентного счетчика."""

    def __init__(self, counter: Counter, prefix: str = "CERT"):
        self.counter = counter
        self.prefix = prefix
        # Номер не обрезается при значениях >= 100000, поле расширяется
        self.pattern = re.compile(rf'^{re.escape(prefix)}-(\d{{8}})-(\d{{5,}})$')

    def generate(self, today: date) -> str:
        """
        Генерирует ID сертификата.

        Формат: PREFIX-YYYYMMDD-NNNNN
        Счетчик общий для всех дат и не сбрасывается при смене дня.

        Args:
            today: Текущая дата

        Returns:
            str: Новый ID сертификата
        """
        sequence = self.counter.next()
        return f"{self.prefix}-{today.strftime('%Y%m%d')}-{sequence:05d}"

    def validate_id_format(self, certificate_id: str) -> bool:
        """
        Проверяет корректность формата ID сертификата.

        Args:
            certificate_id: ID для проверки

        Returns:
            bool: True если формат корректен, False иначе
        """
        match = self.pattern.match(certificate_id or "")
        if not match:
            return False

        try:
            datetime.strptime(match.group(1), "%Y%m%d")
        except ValueError:
            return False
        return True

