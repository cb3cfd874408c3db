"""
End-to-end tests for run_with_secrets.

A file vault and env-file are written under tmp_path; the command is the
current Python interpreter.
"""
import io
import logging
import sys

import pytest

from sectool.core.config import ExecConfig, SectoolConfig
from sectool.core.logging import SecureLogFilter
from sectool.core.runtime import run_with_secrets
from sectool.core.vault import FileVaultStore, MemoryVaultStore


def _py(code):
    return [sys.executable, "-c", code]


@pytest.fixture
def vault(tmp_path):
    store = FileVaultStore(tmp_path / "repository.vault", "master-key")
    store.set("S", "secret1")
    store.set("CERT", "-----BEGIN-----\nabc\n-----END-----")
    return store


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / "sectool.env"
    path.write_text("# injected\nA=x\nB=$S\nC=$CERT\n", encoding="utf-8")
    return path


@pytest.fixture
def config():
    return SectoolConfig()


class TestRunWithSecrets:

    def test_injects_and_redacts(self, vault, env_file, config):
        out = io.BytesIO()
        code = run_with_secrets(
            _py("import os; print(os.environ['A'], os.environ['B'])"),
            vault, env_file, config=config, stdout=out, stderr=io.BytesIO(),
        )
        assert code == 0
        # literal values are redacted too
        assert out.getvalue().strip() == b"[HIDDEN] [HIDDEN]"

    def test_multiline_secret_redacted(self, vault, env_file, config):
        out = io.BytesIO()
        run_with_secrets(
            _py("import os, sys; sys.stdout.write(os.environ['C'])"),
            vault, env_file, config=config, stdout=out, stderr=io.BytesIO(),
        )
        assert out.getvalue() == b"[HIDDEN]"

    def test_vault_key_is_redacted(self, vault, env_file, config):
        out = io.BytesIO()
        run_with_secrets(
            _py("print('master-key')"),
            vault, env_file, config=config, stdout=out, stderr=io.BytesIO(),
        )
        assert b"master-key" not in out.getvalue()

    def test_child_exit_code(self, vault, env_file, config):
        code = run_with_secrets(
            _py("import sys; sys.exit(7)"),
            vault, env_file, config=config, stdout=io.BytesIO(), stderr=io.BytesIO(),
        )
        assert code == 7

    def test_config_placeholder(self, vault, env_file):
        out = io.BytesIO()
        config = SectoolConfig(exec=ExecConfig(placeholder="<redacted>"))
        run_with_secrets(
            _py("import os; print(os.environ['B'])"),
            vault, env_file, config=config, stdout=out, stderr=io.BytesIO(),
        )
        assert out.getvalue().strip() == b"<redacted>"


class TestPreExecFailures:
    """Every failure before spawning returns 125 and runs nothing."""

    def test_unresolved_placeholder_spawns_nothing(self, tmp_path, config):
        marker = tmp_path / "ran"
        env_file = tmp_path / "sectool.env"
        env_file.write_text("X=$MISSING\n", encoding="utf-8")
        code = run_with_secrets(
            _py(f"open({str(marker)!r}, 'w').close()"),
            MemoryVaultStore(), env_file, config=config,
            stdout=io.BytesIO(), stderr=io.BytesIO(),
        )
        assert code == 125
        assert not marker.exists()

    def test_malformed_env_file(self, tmp_path, config):
        env_file = tmp_path / "sectool.env"
        env_file.write_text("NOEQUALS\n", encoding="utf-8")
        assert run_with_secrets(_py("pass"), MemoryVaultStore(), env_file, config=config) == 125

    def test_missing_env_file(self, tmp_path, config):
        code = run_with_secrets(
            _py("pass"), MemoryVaultStore(), tmp_path / "absent.env", config=config,
        )
        assert code == 125

    def test_wrong_vault_key(self, vault, env_file, config):
        wrong = FileVaultStore(vault.path, "wrong-key")
        assert run_with_secrets(_py("pass"), wrong, env_file, config=config) == 125

    def test_launch_failure(self, vault, env_file, config):
        code = run_with_secrets(["/nonexistent/program"], vault, env_file, config=config)
        assert code == 125

    def test_missing_vault_key_from_config(self, tmp_path, clean_env, env_file, sectool_logger):
        clean_env.chdir(tmp_path)
        assert run_with_secrets(_py("pass"), env_file=env_file) == 125


class TestConfiguredDefaults:

    def test_vault_and_env_file_from_config(self, tmp_path, clean_env, vault, sectool_logger):
        clean_env.chdir(tmp_path)
        clean_env.setenv("FILE_VAULT_KEY", "master-key")
        (tmp_path / "sectool.env").write_text("B=$S\n", encoding="utf-8")
        out = io.BytesIO()
        code = run_with_secrets(
            _py("import os; print(len(os.environ['B']))"),
            stdout=out, stderr=io.BytesIO(),
        )
        assert code == 0
        assert out.getvalue().strip() == b"7"


class TestVaultKeyIsolation:
    """The vault master key is redacted but never injectable."""

    def test_vault_key_placeholder_fails_closed(self, vault, tmp_path, config):
        marker = tmp_path / "seen"
        env_file = tmp_path / "sectool.env"
        env_file.write_text("X=$SECTOOL_VAULT_KEY\n", encoding="utf-8")
        code = run_with_secrets(
            _py(f"import os; open({str(marker)!r}, 'w').write(os.environ['X'])"),
            vault, env_file, config=config,
            stdout=io.BytesIO(), stderr=io.BytesIO(),
        )
        assert code == 125
        assert not marker.exists()

    def test_vault_record_named_like_the_key_entry(self, vault, tmp_path, config):
        vault.set("SECTOOL_VAULT_KEY", "other")
        env_file = tmp_path / "sectool.env"
        env_file.write_text("X=$SECTOOL_VAULT_KEY\n", encoding="utf-8")
        out = io.BytesIO()
        code = run_with_secrets(
            _py("import os; print('master-key', os.environ['X'] == 'other')"),
            vault, env_file, config=config, stdout=out, stderr=io.BytesIO(),
        )
        assert code == 0
        assert b"master-key" not in out.getvalue()
        assert out.getvalue().strip() == b"[HIDDEN] True"


class TestRejectedInput:

    def test_nul_in_secret_value(self, tmp_path, config):
        env_file = tmp_path / "sectool.env"
        env_file.write_text("X=$S\n", encoding="utf-8")
        code = run_with_secrets(
            _py("pass"), MemoryVaultStore({"S": "a\x00b"}), env_file, config=config,
            stdout=io.BytesIO(), stderr=io.BytesIO(),
        )
        assert code == 125

    def test_empty_variable_name(self, tmp_path, config):
        env_file = tmp_path / "sectool.env"
        env_file.write_text("=x\n", encoding="utf-8")
        code = run_with_secrets(
            _py("pass"), MemoryVaultStore(), env_file, config=config,
            stdout=io.BytesIO(), stderr=io.BytesIO(),
        )
        assert code == 125


class TestLoggingFromConfig:

    def test_loaded_config_configures_logging(self, tmp_path, clean_env, env_file,
                                             sectool_logger, capsys):
        clean_env.chdir(tmp_path)
        code = run_with_secrets(_py("pass"), env_file=env_file)
        assert code == 125
        assert any(
            isinstance(f, SecureLogFilter)
            for handler in sectool_logger.handlers
            for f in handler.filters
        )
        assert "FILE_VAULT_KEY is not defined" in capsys.readouterr().err

    def test_console_disabled_by_config(self, tmp_path, clean_env, env_file,
                                        sectool_logger, capsys):
        clean_env.chdir(tmp_path)
        clean_env.setenv("SECTOOL_LOGGING__ENABLE_CONSOLE", "false")
        assert run_with_secrets(_py("pass"), env_file=env_file) == 125
        assert isinstance(sectool_logger.handlers[0], logging.NullHandler)
        assert "FILE_VAULT_KEY" not in capsys.readouterr().err
