"""
Кастомные исключения для системы сертификатов участия.
"""


class CertificateError(Exception):
    """Базовое исключение для всех ошибок сертификатов."""
    pass


class ValidationError(CertificateError):
    """Ошибка валидации входных данных."""
    pass


class RenderError(CertificateError):
    """Ошибка формирования документа сертификата."""
    pass


class PersistenceError(CertificateError):
    """Ошибка работы с хранилищем записей или счетчиком."""
    pass


class CertificateNotFoundError(CertificateError):
    """Сертификат не найден."""
    pass
