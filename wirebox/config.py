"""
Layered injector configuration.

Sources merge with precedence (later overrides earlier):
defaults < .env file < environment variables < explicit overrides.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Set
import logging
import os

from dotenv import dotenv_values


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class InjectorConfig:
    """
    Settings applied when an injector is constructed.

    Attributes:
        diagnostics: Attach a logging diagnostic listener
        log_level: Level name used by that listener
        name: Label used for the injector in log output
    """

    diagnostics: bool = False
    log_level: str = "DEBUG"
    name: str = "injector"

    @classmethod
    def load(
        cls,
        env_prefix: str = "WIREBOX_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "InjectorConfig":
        """
        Load configuration from the environment.

        Args:
            env_prefix: Prefix for environment variables (``WIREBOX_DIAGNOSTICS=1``)
            env_file: Path to a .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Validated config instance
        """
        known = {f.name for f in fields(cls)}
        data: Dict[str, Any] = {}

        # Other settings may share the prefix; only our own keys are read
        if env_file and Path(env_file).exists():
            data.update(_prefixed(dotenv_values(env_file), env_prefix, known))

        data.update(_prefixed(os.environ, env_prefix, known))

        if overrides:
            data.update(overrides)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InjectorConfig":
        types = {f.name: f.type for f in fields(cls)}
        unknown = set(data) - set(types)
        if unknown:
            raise ConfigError(f"Unknown injector config keys: {', '.join(sorted(unknown))}")

        config = cls(**{key: _parse_value(key, types[key], value) for key, value in data.items()})
        config.validate()
        return config

    def validate(self) -> None:
        if not isinstance(self.diagnostics, bool):
            raise ConfigError(f"diagnostics must be a boolean, got {self.diagnostics!r}")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise ConfigError(f"Unknown log level: {self.log_level!r}")
        if not isinstance(self.name, str) or not self.name:
            raise ConfigError(f"name must be a non-empty string, got {self.name!r}")

    @property
    def level(self) -> int:
        """Numeric logging level for :attr:`log_level`."""
        return logging.getLevelName(str(self.log_level).upper())


def _prefixed(values: Any, prefix: str, known: Set[str]) -> Dict[str, Any]:
    """Pick ``PREFIX_KEY`` entries naming a known field, as lower-case ``key``."""
    picked = {}
    for key, value in values.items():
        if not key.startswith(prefix) or value is None:
            continue
        name = key[len(prefix):].lower()
        if name in known:
            picked[name] = value
    return picked


_TRUE = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0")


def _parse_value(key: str, kind: Any, value: Any) -> Any:
    """Parse a string value according to the field's declared type."""
    if not isinstance(value, str) or kind is not bool:
        return value
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")
