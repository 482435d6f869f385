"""Discovery settings and their YAML loader.

Settings are read-only: lslocator reads an optional YAML file but never
writes one. Lookup order for the file is an explicit path, then
``$LSLOCATOR_CONFIG``, then ``~/.config/lslocator/config.yaml``. A missing
default file simply means "use the defaults".

Example ``config.yaml``::

    product_name: antigravity
    probe_timeout: 2.5
    ambient_fallback: true
    retry:
      attempts: 5
      base_delay_ms: 500
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from lslocator.exceptions import ConfigError
from lslocator.gateway import DEFAULT_ENDPOINT
from lslocator.gateway import DEFAULT_TIMEOUT as DEFAULT_PROBE_TIMEOUT
from lslocator.models import DiscoveryConfig
from lslocator.probing import LOOPBACK, PORT_COMMAND_TIMEOUT
from lslocator.shell import DEFAULT_TIMEOUT as DEFAULT_COMMAND_TIMEOUT
from lslocator.signature import DEFAULT_SIGNATURE

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LSLOCATOR_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "lslocator" / "config.yaml"


@dataclass(frozen=True)
class LocatorSettings:
    """Everything discovery needs besides the retry policy's call-site overrides.

    Attributes:
        product_name: Name the ``--app_data_dir`` value must contain in
            strict mode.
        process_name: Executable to look for; None picks the per-OS default.
        host: Primary host to probe.
        endpoint: Gateway RPC path.
        probe_timeout: Seconds per gateway request.
        command_timeout: Seconds per process listing command.
        port_command_timeout: Seconds per port listing command.
        confirm_known_port: Verify that a port read from the command line is
            actually listening before probing it.
        ambient_fallback: Run ambient discovery when the strict finder fails.
        signature: Substring ambient discovery searches every process for.
        retry: Retry policy for the strict finder.
    """

    product_name: str = "antigravity"
    process_name: str | None = None
    host: str = LOOPBACK
    endpoint: str = DEFAULT_ENDPOINT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    port_command_timeout: float = PORT_COMMAND_TIMEOUT
    confirm_known_port: bool = True
    ambient_fallback: bool = True
    signature: str = DEFAULT_SIGNATURE
    retry: DiscoveryConfig = field(default_factory=DiscoveryConfig)

    def __post_init__(self) -> None:
        if not self.product_name:
            raise ConfigError("product_name must not be empty")
        for name in ("probe_timeout", "command_timeout", "port_command_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")

    def with_overrides(self, **changes: Any) -> LocatorSettings:
        """Copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


_BOOL_FIELDS = {"confirm_known_port", "ambient_fallback"}
_FLOAT_FIELDS = {"probe_timeout", "command_timeout", "port_command_timeout"}
_STR_FIELDS = {"product_name", "process_name", "host", "endpoint", "signature"}
_RETRY_FIELDS = {f.name for f in fields(DiscoveryConfig)}


def _check_type(key: str, value: Any) -> Any:
    if key in _BOOL_FIELDS and not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    if key in _FLOAT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{key} must be a number, got {value!r}")
        return float(value)
    if key in _STR_FIELDS and value is not None and not isinstance(value, str):
        raise ConfigError(f"{key} must be a string, got {value!r}")
    return value


def _build_retry(raw: Any) -> DiscoveryConfig:
    if not isinstance(raw, Mapping):
        raise ConfigError("retry must be a mapping")
    unknown = set(raw) - _RETRY_FIELDS
    if unknown:
        raise ConfigError(f"Unknown retry setting(s): {', '.join(sorted(unknown))}")
    for key, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"retry.{key} must be an integer, got {value!r}")
    return DiscoveryConfig(**raw)


def settings_from_mapping(data: Mapping[str, Any]) -> LocatorSettings:
    """Build settings from a parsed YAML mapping.

    Raises:
        ConfigError: On unknown keys or wrongly typed values.
    """
    known = {f.name for f in fields(LocatorSettings)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key == "retry":
            kwargs["retry"] = _build_retry(value)
        else:
            kwargs[key] = _check_type(key, value)
    return LocatorSettings(**kwargs)


def resolve_config_path(path: Path | None = None) -> tuple[Path, bool]:
    """Return the settings file to read and whether it was asked for explicitly."""
    if path is not None:
        return Path(path), True
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env), True
    return DEFAULT_CONFIG_PATH, False


def load_settings(path: Path | None = None) -> LocatorSettings:
    """Load settings from YAML, falling back to defaults.

    Args:
        path: Explicit settings file. Must exist when given.

    Returns:
        Parsed ``LocatorSettings``.

    Raises:
        ConfigError: If an explicitly requested file is missing, the YAML is
            malformed, or the content is invalid.
    """
    config_path, explicit = resolve_config_path(path)
    if not config_path.is_file():
        if explicit:
            raise ConfigError(f"Settings file not found: {config_path}")
        return LocatorSettings()

    try:
        raw = config_path.read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
    except (OSError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read settings from {config_path}: {exc}") from exc

    if data is None:
        return LocatorSettings()
    if not isinstance(data, Mapping):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    logger.debug("Loaded settings from %s", config_path)
    return settings_from_mapping(data)
