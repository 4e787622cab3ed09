"""
Tests for settings and process bootstrap.
"""

from pathlib import Path

import pytest

from growthlog.bootstrap import build_facade, create_backend, ensure_token_secret
from growthlog.config import Settings, load_config_file
from growthlog.db.backends import JsonFileBackend, MemoryBackend


class TestSettings:
    """Test environment and YAML layering."""

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.storage == "json"
        assert settings.data_dir == Path("~/.growthlog").expanduser()
        assert settings.require_birth_date is False
        assert settings.hide_forbidden is False
        assert settings.token_secret is None
        assert settings.log_level == "INFO"

    def test_environment(self, tmp_path):
        settings = Settings.from_env({
            "GROWTHLOG_STORAGE": "memory",
            "GROWTHLOG_DATA_DIR": str(tmp_path),
            "GROWTHLOG_REQUIRE_BIRTH_DATE": "yes",
            "GROWTHLOG_HIDE_FORBIDDEN": "1",
            "GROWTHLOG_TOKEN_SECRET": "s3cret",
            "GROWTHLOG_LOG_LEVEL": "debug",
        })

        assert settings.storage == "memory"
        assert settings.data_file == tmp_path / "growthlog.json"
        assert settings.token_file == tmp_path / "token"
        assert settings.require_birth_date is True
        assert settings.hide_forbidden is True
        assert settings.token_secret == "s3cret"
        assert settings.log_level == "DEBUG"

    def test_yaml_file_under_environment(self, tmp_path):
        config = tmp_path / "growthlog.yaml"
        config.write_text(
            "storage: memory\n"
            "require_birth_date: true\n"
            "log_level: WARNING\n"
        )

        settings = Settings.from_env({
            "GROWTHLOG_CONFIG": str(config),
            "GROWTHLOG_LOG_LEVEL": "ERROR",
        })

        assert settings.storage == "memory"
        assert settings.require_birth_date is True
        assert settings.log_level == "ERROR"

    def test_config_file_must_be_mapping(self, tmp_path):
        config = tmp_path / "growthlog.yaml"
        config.write_text("- storage\n- memory\n")
        with pytest.raises(ValueError):
            load_config_file(config)
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "missing.yaml")

    def test_validate(self):
        with pytest.raises(ValueError, match="GROWTHLOG_STORAGE"):
            Settings(storage="floppy").validate()
        with pytest.raises(ValueError, match="SUPABASE_URL"):
            Settings(storage="supabase").validate()
        with pytest.raises(ValueError, match="SUPABASE_SERVICE_KEY"):
            Settings(storage="supabase", supabase_url="https://example.supabase.co").validate()
        Settings(storage="memory").validate()


class TestBootstrap:
    """Test wiring from settings."""

    def test_backend_kinds(self, tmp_path):
        assert isinstance(create_backend(Settings(storage="memory")), MemoryBackend)
        backend = create_backend(Settings(storage="json", data_dir=tmp_path))
        assert isinstance(backend, JsonFileBackend)
        assert backend.path == tmp_path / "growthlog.json"

    def test_token_secret_created_once(self, tmp_path):
        first = ensure_token_secret(Settings(data_dir=tmp_path))
        second = ensure_token_secret(Settings(data_dir=tmp_path))

        assert first
        assert first == second
        assert (tmp_path / "secret").stat().st_mode & 0o777 == 0o600

    def test_configured_secret_wins(self, tmp_path):
        assert ensure_token_secret(Settings(data_dir=tmp_path, token_secret="given")) == "given"
        assert not (tmp_path / "secret").exists()

    def test_build_facade_requires_secret(self):
        with pytest.raises(ValueError):
            build_facade(Settings(storage="memory"))

    def test_build_facade_applies_policy(self):
        settings = Settings(storage="memory", token_secret="s", require_birth_date=True, hide_forbidden=True)
        facade = build_facade(settings)

        assert facade.hide_forbidden is True
        assert facade.store.require_birth_date is True
