"""
CLI интерфейс для генератора сертификатов участия
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from config.settings import Settings, get_settings, load_settings_from_file
from core.exceptions import CertificateNotFoundError, PersistenceError, RenderError, ValidationError
from core.models import CertificateRecord
from core.service import CertificateService, build_certificate_service, download_filename, sort_newest_first
from core.validators import DataValidator


class CertificateCLI:
    """CLI интерфейс для работы с сертификатами"""

    def __init__(self, service: Optional[CertificateService] = None,
                 settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.validator = DataValidator()
        self.setup_logging()
        self.service = service or build_certificate_service(self.settings)

    def setup_logging(self):
        """Настройка логирования"""
        self.settings.create_directories()
        logging.basicConfig(
            level=logging.DEBUG if self.settings.debug else getattr(logging, self.settings.log_level),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(self.settings.log_file, encoding='utf-8'),
                logging.StreamHandler()
            ]
        )
        self.logger = logging.getLogger(__name__)

    async def generate_certificate(self, args):
        """Генерация сертификата через CLI"""
        raw = {
            "event_name": args.event,
            "event_date": args.date,
            "event_location": args.location,
            "participant_name": args.participant,
            "participant_role": args.role,
            "event_duration": args.duration,
        }

        try:
            data = self.validator.parse(raw)
            emblem = self._read_logo(args.logo)

            record = await self.service.issue(data, emblem)
            output = Path(args.output or download_filename(record))
            output.write_bytes(record.document)

            print("✓ Certificado generado con éxito:")
            self._print_record(record)
            print(f"  Archivo: {output}")

            self.logger.info(f"Создан сертификат {record.id}, файл: {output}")

        except ValidationError as e:
            print(f"✗ Por favor, complete todos los campos obligatorios: {e}")
            sys.exit(1)
        except (RenderError, PersistenceError, OSError) as e:
            print(f"✗ Error al generar el certificado: {e}")
            self.logger.error(f"Ошибка генерации сертификата: {e}")
            sys.exit(1)

    async def list_certificates(self, args):
        """Список сертификатов, сначала самые новые"""
        try:
            records = sort_newest_first(await self.service.search(args.search))
        except PersistenceError as e:
            print(f"✗ Error al cargar el historial de certificados: {e}")
            sys.exit(1)

        if not records:
            print("No se encontraron certificados")
            return

        for record in records:
            print(
                f"  {record.id}  {record.participant_name}  "
                f"{record.event_name}  {record.event_date_text}"
            )

    async def show_certificate(self, args):
        """Просмотр сертификата по ID"""
        try:
            record = await self._require(args.certificate_id)
        except (CertificateNotFoundError, ValidationError) as e:
            print(f"✗ {e}")
            sys.exit(1)
        except PersistenceError as e:
            print(f"✗ Error al cargar el certificado: {e}")
            sys.exit(1)

        print("✓ Certificado encontrado:")
        self._print_record(record)
        print(f"  Creado: {record.created_at.strftime('%d/%m/%Y %H:%M')}")

    async def download_certificate(self, args):
        """Сохранение PDF сертификата в файл"""
        try:
            record = await self._require(args.certificate_id)
            output = Path(args.output or download_filename(record))
            output.write_bytes(record.document)
        except (CertificateNotFoundError, ValidationError) as e:
            print(f"✗ {e}")
            sys.exit(1)
        except PersistenceError as e:
            print(f"✗ Error al cargar el certificado: {e}")
            sys.exit(1)
        except OSError as e:
            print(f"✗ Error al descargar el certificado: {e}")
            self.logger.error(f"Ошибка записи файла сертификата: {e}")
            sys.exit(1)

        print(f"✓ Descarga completada: {output}")

    async def delete_certificate(self, args):
        """Удаление сертификата"""
        try:
            await self.service.delete(args.certificate_id)
        except PersistenceError as e:
            print(f"✗ Error al eliminar el certificado: {e}")
            sys.exit(1)

        print(f"✓ Certificado eliminado: {args.certificate_id}")

    async def _require(self, certificate_id: str) -> CertificateRecord:
        if not self.service.id_generator.validate_id_format(certificate_id):
            raise ValidationError(f"ID de certificado no válido: {certificate_id}")

        record = await self.service.get_by_id(certificate_id)
        if record is None:
            raise CertificateNotFoundError(f"Certificado no encontrado: {certificate_id}")
        return record

    def _read_logo(self, logo: Optional[str]) -> Optional[bytes]:
        if not logo:
            return None
        try:
            return Path(logo).read_bytes()
        except OSError as e:
            # Сертификат формируется и без эмблемы
            print(f"⚠ Error al cargar el logo, se generará sin él: {e}")
            self.logger.warning(f"Не удалось прочитать файл эмблемы {logo}: {e}")
            return None

    def _print_record(self, record: CertificateRecord):
        print(f"  ID: {record.id}")
        print(f"  Evento: {record.event_name}")
        print(f"  Fecha: {record.event_date_text}")
        print(f"  Lugar: {record.event_location}")
        print(f"  Participante: {record.participant_name}")
        print(f"  Rol: {record.participant_role}")
        print(f"  Duración: {record.duration_text} horas")

    def build_parser(self) -> argparse.ArgumentParser:
        """Парсер аргументов командной строки"""
        parser = argparse.ArgumentParser(
            description="Generador de certificados de participación",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Ejemplos:
  %(prog)s generate --event "Taller de Rust" --date 2024-05-10 --location Lima \\
      --participant "Carlos Ruiz" --role Ponente --duration 8 --logo logo.png
  %(prog)s list --search ruiz
  %(prog)s download CERT-20240510-00001
            """
        )

        parser.add_argument('--env-file', help='Archivo .env con la configuración')

        subparsers = parser.add_subparsers(dest='command', help='Comandos disponibles')

        gen_parser = subparsers.add_parser('generate', help='Generar un certificado nuevo')
        gen_parser.add_argument('--event', required=True, help='Nombre del evento')
        gen_parser.add_argument('--date', required=True, help='Fecha del evento (AAAA-MM-DD)')
        gen_parser.add_argument('--location', required=True, help='Lugar del evento')
        gen_parser.add_argument('--participant', required=True, help='Nombre del participante')
        gen_parser.add_argument('--role', default='Asistente',
                                help='Rol: Asistente, Ponente u Organizador')
        gen_parser.add_argument('--duration', required=True, help='Duración en horas')
        gen_parser.add_argument('--logo', help='Imagen del logo (opcional)')
        gen_parser.add_argument('--output', help='Archivo PDF de salida')

        list_parser = subparsers.add_parser('list', help='Historial de certificados')
        list_parser.add_argument('--search', default='', help='ID, participante, evento o fecha')

        show_parser = subparsers.add_parser('show', help='Ver un certificado')
        show_parser.add_argument('certificate_id', help='ID del certificado')

        download_parser = subparsers.add_parser('download', help='Descargar el PDF de un certificado')
        download_parser.add_argument('certificate_id', help='ID del certificado')
        download_parser.add_argument('--output', help='Archivo PDF de salida')

        delete_parser = subparsers.add_parser('delete', help='Eliminar un certificado')
        delete_parser.add_argument('certificate_id', help='ID del certificado')

        return parser

    def main(self, argv=None):
        """Главная функция CLI"""
        parser = self.build_parser()
        args = parser.parse_args(argv)

        commands = {
            'generate': self.generate_certificate,
            'list': self.list_certificates,
            'show': self.show_certificate,
            'download': self.download_certificate,
            'delete': self.delete_certificate,
        }

        if not args.command:
            parser.print_help()
            return

        asyncio.run(commands[args.command](args))


def main(argv=None):
    """Точка входа консольной команды"""
    # --env-file разбирается до создания CLI
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument('--env-file')
    known, rest = pre_parser.parse_known_args(argv)

    settings = load_settings_from_file(known.env_file) if known.env_file else None
    CertificateCLI(settings=settings).main(rest)


if __name__ == '__main__':
    main()
