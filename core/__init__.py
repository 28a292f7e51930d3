"""
Основной модуль бизнес-логики системы сертификатов участия.
"""

from .service import (
    CertificateService, build_certificate_service,
    sort_newest_first, download_filename
)
from .models import CertificateData, CertificateRecord
from .composer import CertificateComposer
from .generator import CertificateIDGenerator
from .validators import DataValidator
from .storage import KeyedStore, Counter, MemoryStorage, MemoryCounter, FileStorage, FileCounter

__version__ = "1.0.0"

__all__ = [
    'CertificateService',
    'build_certificate_service',
    'sort_newest_first',
    'download_filename',
    'CertificateData',
    'CertificateRecord',
    'CertificateComposer',
    'CertificateIDGenerator',
    'DataValidator',
    'KeyedStore',
    'Counter',
    'MemoryStorage',
    'MemoryCounter',
    'FileStorage',
    'FileCounter'
]
