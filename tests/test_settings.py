"""
Тесты для настроек приложения
"""
import pytest
from pydantic import ValidationError as PydanticValidationError

from config.settings import Settings, load_settings_from_file


class TestSettings:
    """Тесты для класса Settings"""

    def test_defaults(self):
        """Тест значений по умолчанию"""
        settings = Settings(_env_file=None)

        assert settings.storage_backend == "file"
        assert settings.id_prefix == "CERT"
        assert settings.database_url.startswith("sqlite:///")
        assert settings.validation_url == "www.nuestroevento.com/validar"

    def test_id_prefix_normalized(self):
        """Тест нормализации префикса ID"""
        assert Settings(_env_file=None, id_prefix=" evt ").id_prefix == "EVT"

    @pytest.mark.parametrize("prefix", ["", "   ", "A-B"])
    def test_id_prefix_invalid(self, prefix):
        """Тест некорректного префикса ID"""
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, id_prefix=prefix)

    def test_log_level(self):
        """Тест проверки уровня логирования"""
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, log_level="verbose")

    def test_create_directories(self, tmp_path):
        """Тест создания директорий хранилища и логов"""
        settings = Settings(
            _env_file=None,
            certificates_path=tmp_path / "certs",
            counter_file=tmp_path / "state" / ".counter",
            log_file=tmp_path / "logs" / "app.log"
        )

        settings.create_directories()

        assert (tmp_path / "certs").is_dir()
        assert (tmp_path / "state").is_dir()
        assert (tmp_path / "logs").is_dir()

    def test_load_settings_from_file(self, tmp_path):
        """Тест загрузки настроек из .env файла"""
        env_file = tmp_path / "custom.env"
        env_file.write_text(
            "STORAGE_BACKEND=memory\nID_PREFIX=taller\nLOG_LEVEL=warning\n",
            encoding="utf-8"
        )

        settings = load_settings_from_file(str(env_file))

        assert settings.storage_backend == "memory"
        assert settings.id_prefix == "TALLER"
        assert settings.log_level == "WARNING"
