"""
Secure Configuration Module
===========================

Immutable configuration for vault selection, env-file composition and
logging.

Sources, in order of precedence:
1. Explicit constructor arguments
2. The JSON config file (argument, $SECTOOL_CONFIG_FILE, or ./sectool.json)
3. Vault fallbacks: $FILE_VAULT_KEY, $FILE_VAULT_PATH
4. Non-secret overrides: $SECTOOL_<SECTION>__<FIELD>
5. Defaults

Security Features:
- Immutable configuration after initialization
- Key material never appears in repr()
- Secret-looking fields are never taken from generic env overrides
"""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Mapping, Optional

from sectool.core.errors import ConfigError
from sectool.security.constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_ENV_FILE,
    DEFAULT_OBJECT_NAME,
    DEFAULT_VAULT_PATH,
    REDACTION_PLACEHOLDER,
    SENTINEL_ENV_NAME,
    SENTINEL_ENV_VALUE,
)

CONFIG_FILE_ENV: Final[str] = "SECTOOL_CONFIG_FILE"
VAULT_KEY_ENV: Final[str] = "FILE_VAULT_KEY"
VAULT_PATH_ENV: Final[str] = "FILE_VAULT_PATH"
ENV_PREFIX: Final[str] = "SECTOOL"

PROVIDER_FILE: Final[str] = "file"
PROVIDER_MEMORY: Final[str] = "memory"
PROVIDER_OBJECT_STORAGE: Final[str] = "object_storage"
KNOWN_PROVIDERS: Final[frozenset[str]] = frozenset({
    PROVIDER_FILE, PROVIDER_MEMORY, PROVIDER_OBJECT_STORAGE,
})

_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "key", "token", "credential", "auth",
})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


@dataclass(frozen=True, slots=True)
class FileVaultConfig:
    """Local encrypted-file vault settings."""

    path: str = DEFAULT_VAULT_PATH
    key: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("file vault path cannot be empty")


@dataclass(frozen=True, slots=True)
class ObjectStorageConfig:
    """Bucket-backed vault settings."""

    bucket: str = ""
    region: str = ""
    endpoint: str = ""
    key: str = field(default="", repr=False)
    backup: bool = False
    object_name: str = DEFAULT_OBJECT_NAME


@dataclass(frozen=True, slots=True)
class VaultConfig:
    """Which backend to build, plus each backend's settings."""

    provider: str = PROVIDER_FILE
    file: FileVaultConfig = field(default_factory=FileVaultConfig)
    object_storage: ObjectStorageConfig = field(default_factory=ObjectStorageConfig)


@dataclass(frozen=True, slots=True)
class ExecConfig:
    """Env-file and child-process settings."""

    env_file: str = DEFAULT_ENV_FILE
    placeholder: str = REDACTION_PLACEHOLDER
    sentinel_name: str = SENTINEL_ENV_NAME
    sentinel_value: str = SENTINEL_ENV_VALUE

    def __post_init__(self) -> None:
        if not self.placeholder:
            raise ValueError("redaction placeholder cannot be empty")
        if not self.sentinel_name or "=" in self.sentinel_name:
            raise ValueError(f"invalid sentinel variable name: {self.sentinel_name!r}")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "INFO"
    enable_console: bool = True

    def __post_init__(self) -> None:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")


def _section(data: Mapping[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"Config section '{name}' must be an object")
    return dict(value)


class SectoolConfig:
    """
    Centralized, immutable configuration.

    Usage:
        config = SectoolConfig.load()
        vault = create_vault_store(config.vault)
        env_file = config.exec.env_file
    """

    __slots__ = ("_vault", "_exec", "_logging", "_source", "_frozen", "_config_hash")

    def __init__(
        self,
        vault: Optional[VaultConfig] = None,
        exec: Optional[ExecConfig] = None,
        logging: Optional[LoggingConfig] = None,
        source: Optional[Path] = None,
    ) -> None:
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_vault", vault or VaultConfig())
        object.__setattr__(self, "_exec", exec or ExecConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_source", source)
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        """Hash of the non-secret configuration, for diagnostics."""
        config_str = f"{self._vault}|{self._exec}|{self._logging}"
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def vault(self) -> VaultConfig:
        return self._vault

    @property
    def exec(self) -> ExecConfig:
        return self._exec

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def source(self) -> Optional[Path]:
        """The config file that was read, or None when defaults were used."""
        return self._source

    @property
    def config_hash(self) -> str:
        return self._config_hash

    @staticmethod
    def resolve_path(config_file: Optional[str | Path] = None) -> Path:
        """Pick the config file: argument, then $SECTOOL_CONFIG_FILE, then default."""
        if config_file:
            return Path(config_file)
        return Path(os.environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE)

    @classmethod
    def load(cls, config_file: Optional[str | Path] = None) -> SectoolConfig:
        """
        Load configuration from JSON with environment fallbacks.

        A missing config file is not an error; defaults apply.

        Raises:
            ConfigError: If the file cannot be read, is not valid JSON,
                or holds invalid values
        """
        path = cls.resolve_path(config_file)
        data: dict[str, Any] = {}
        source: Optional[Path] = None

        if path.exists():
            try:
                raw = path.read_text(encoding="utf-8")
            except OSError as e:
                raise ConfigError(f"Failed to open config file: {path}") from e
            try:
                data = json.loads(raw) if raw.strip() else {}
            except json.JSONDecodeError as e:
                raise ConfigError(f"Failed to parse config file {path}: {e.msg}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {path} must contain a JSON object")
            source = path

        return cls.from_mapping(data, source=source)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        source: Optional[Path] = None,
    ) -> SectoolConfig:
        """Build a config from an already-parsed mapping plus the environment."""
        overrides = cls._parse_env_overrides(ENV_PREFIX)

        file_kwargs = _section(data, "file")
        if not file_kwargs.get("key"):
            file_kwargs["key"] = os.environ.get(VAULT_KEY_ENV, "")
        if not file_kwargs.get("path"):
            file_kwargs["path"] = os.environ.get(VAULT_PATH_ENV) or DEFAULT_VAULT_PATH

        os_kwargs = _section(data, "object_storage")
        if not os_kwargs.get("key"):
            os_kwargs["key"] = os.environ.get(VAULT_KEY_ENV, "")

        exec_kwargs = _section(data, "exec")
        for name in ("env_file", "placeholder", "sentinel_name", "sentinel_value"):
            if f"exec.{name}" in overrides:
                exec_kwargs[name] = overrides[f"exec.{name}"]

        logging_kwargs = _section(data, "logging")
        if "logging.level" in overrides:
            logging_kwargs["level"] = overrides["logging.level"]
        if "logging.enable_console" in overrides:
            logging_kwargs["enable_console"] = overrides["logging.enable_console"].lower() == "true"

        provider = str(overrides.get("vault.provider") or data.get("provider") or PROVIDER_FILE)

        try:
            vault = VaultConfig(
                provider=provider,
                file=FileVaultConfig(**file_kwargs),
                object_storage=ObjectStorageConfig(**os_kwargs),
            )
            return cls(
                vault=vault,
                exec=ExecConfig(**exec_kwargs),
                logging=LoggingConfig(**logging_kwargs),
                source=source,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse SECTOOL_SECTION__FIELD variables into 'section.field' keys."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                # Never take key material from this channel
                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    def __repr__(self) -> str:
        """Safe string representation without sensitive data."""
        return f"SectoolConfig(hash={self._config_hash}, provider={self._vault.provider})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if getattr(self, "_frozen", False):
            raise AttributeError("SectoolConfig is immutable after initialization")
        super().__setattr__(name, value)
