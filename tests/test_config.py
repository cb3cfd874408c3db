"""
Tests for SectoolConfig loading.

Tests cover:
- Defaults when no config file exists
- JSON config file selection and parsing errors
- FILE_VAULT_KEY / FILE_VAULT_PATH fallbacks
- SECTOOL_<SECTION>__<FIELD> overrides, minus secret-looking fields
- Immutability and safe repr
"""
import json

import pytest

from sectool.core.config import (
    ExecConfig,
    FileVaultConfig,
    LoggingConfig,
    SectoolConfig,
)
from sectool.core.errors import ConfigError


@pytest.fixture
def in_tmp(tmp_path, clean_env):
    clean_env.chdir(tmp_path)
    return tmp_path


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestDefaults:

    def test_no_file(self, in_tmp):
        config = SectoolConfig.load()
        assert config.source is None
        assert config.vault.provider == "file"
        assert config.vault.file.path == "repository.vault"
        assert config.vault.file.key == ""
        assert config.exec.env_file == "sectool.env"
        assert config.exec.placeholder == "[HIDDEN]"
        assert config.logging.level == "INFO"

    def test_env_fallbacks(self, in_tmp, clean_env):
        clean_env.setenv("FILE_VAULT_KEY", "from-env")
        clean_env.setenv("FILE_VAULT_PATH", "/tmp/other.vault")
        config = SectoolConfig.load()
        assert config.vault.file.key == "from-env"
        assert config.vault.file.path == "/tmp/other.vault"
        assert config.vault.object_storage.key == "from-env"


class TestConfigFile:

    def test_default_file_in_cwd(self, in_tmp):
        _write(in_tmp / "sectool.json", {"provider": "memory"})
        config = SectoolConfig.load()
        assert config.vault.provider == "memory"
        assert config.source == in_tmp / "sectool.json"

    def test_file_from_env_variable(self, in_tmp, clean_env):
        path = _write(in_tmp / "custom.json", {"file": {"path": "x.vault", "key": "k"}})
        clean_env.setenv("SECTOOL_CONFIG_FILE", str(path))
        config = SectoolConfig.load()
        assert config.vault.file.path == "x.vault"
        assert config.vault.file.key == "k"

    def test_explicit_argument_wins(self, in_tmp, clean_env):
        clean_env.setenv("SECTOOL_CONFIG_FILE", str(in_tmp / "ignored.json"))
        path = _write(in_tmp / "explicit.json", {"provider": "memory"})
        assert SectoolConfig.load(path).vault.provider == "memory"

    def test_file_key_beats_env(self, in_tmp, clean_env):
        clean_env.setenv("FILE_VAULT_KEY", "from-env")
        _write(in_tmp / "sectool.json", {"file": {"key": "from-file"}})
        assert SectoolConfig.load().vault.file.key == "from-file"

    def test_object_storage_section(self, in_tmp):
        _write(in_tmp / "sectool.json", {
            "provider": "object_storage",
            "object_storage": {
                "bucket": "b", "region": "eu-west-1",
                "endpoint": "https://s3.example.com", "backup": True,
            },
        })
        settings = SectoolConfig.load().vault.object_storage
        assert settings.bucket == "b"
        assert settings.backup is True
        assert settings.object_name == "repository.vault"

    def test_invalid_json(self, in_tmp):
        (in_tmp / "sectool.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            SectoolConfig.load()

    def test_not_an_object(self, in_tmp):
        _write(in_tmp / "sectool.json", ["a", "b"])
        with pytest.raises(ConfigError):
            SectoolConfig.load()

    def test_unknown_field(self, in_tmp):
        _write(in_tmp / "sectool.json", {"file": {"colour": "blue"}})
        with pytest.raises(ConfigError):
            SectoolConfig.load()

    def test_invalid_log_level(self, in_tmp):
        _write(in_tmp / "sectool.json", {"logging": {"level": "LOUD"}})
        with pytest.raises(ConfigError):
            SectoolConfig.load()

    def test_empty_file_means_defaults(self, in_tmp):
        (in_tmp / "sectool.json").write_text("", encoding="utf-8")
        assert SectoolConfig.load().vault.provider == "file"


class TestEnvOverrides:

    def test_section_field_override(self, in_tmp, clean_env):
        clean_env.setenv("SECTOOL_EXEC__ENV_FILE", "prod.env")
        clean_env.setenv("SECTOOL_LOGGING__LEVEL", "DEBUG")
        clean_env.setenv("SECTOOL_VAULT__PROVIDER", "memory")
        config = SectoolConfig.load()
        assert config.exec.env_file == "prod.env"
        assert config.logging.level == "DEBUG"
        assert config.vault.provider == "memory"

    def test_sensitive_overrides_ignored(self, in_tmp, clean_env):
        clean_env.setenv("SECTOOL_FILE__KEY", "should-not-be-read")
        overrides = SectoolConfig._parse_env_overrides("SECTOOL")
        assert "file.key" not in overrides


class TestImmutability:

    def test_cannot_set_attributes(self):
        config = SectoolConfig()
        with pytest.raises(AttributeError):
            config.vault = None

    def test_repr_hides_key(self):
        config = SectoolConfig.from_mapping({"file": {"key": "super-secret"}})
        assert "super-secret" not in repr(config)
        assert "super-secret" not in repr(config.vault)

    def test_hash_is_stable(self):
        assert SectoolConfig().config_hash == SectoolConfig().config_hash


class TestSectionValidation:

    def test_empty_vault_path(self):
        with pytest.raises(ValueError):
            FileVaultConfig(path="")

    def test_empty_placeholder(self):
        with pytest.raises(ValueError):
            ExecConfig(placeholder="")

    def test_bad_sentinel(self):
        with pytest.raises(ValueError):
            ExecConfig(sentinel_name="A=B")

    def test_log_level_case_insensitive(self):
        assert LoggingConfig(level="debug").level == "debug"
