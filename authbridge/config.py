"""Configuration loader for TOML or YAML bridge configuration files."""

import os
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import structlog
import yaml

from .errors import ConfigError

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = "config.toml"
DEFAULT_TIMEOUT = 10


class BackendKind(Enum):
    """Which upstream identity system authenticates users."""

    FLOW = "flow"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class FlowSettings:
    """Identity provider flow executor settings."""

    base_url: str
    flow_slug: str
    ca_cert_path: str | None = None
    verify_tls: bool = True


@dataclass(frozen=True)
class DirectorySettings:
    """LDAP directory settings."""

    url: str
    bind_dn: str
    bind_password: str
    user_base_dn: str
    username_attribute: str = "cn"
    group_attribute: str = "memberOf"
    group_prefix: str = "cn="
    ca_cert_path: str | None = None
    verify_tls: bool = True


@dataclass(frozen=True)
class Config:
    """Validated bridge configuration."""

    backend: BackendKind
    timeout: int = DEFAULT_TIMEOUT
    admin_group_name: str | None = None
    user_group_name: str | None = None
    flow: FlowSettings | None = None
    directory: DirectorySettings | None = None


def _require_str(section: dict[str, Any], key: str, where: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"Missing or invalid '{key}' in {where}")
    return value


def _optional_str(section: dict[str, Any], key: str, where: str) -> str | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' in {where} must be a string")
    return value or None


def _str_or_default(section: dict[str, Any], key: str, where: str, default: str) -> str:
    # Empty strings are kept as given
    value = section.get(key, default)
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' in {where} must be a string")
    return value


def _bool(section: dict[str, Any], key: str, where: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' in {where} must be true or false")
    return value


def _check_url(url: str, schemes: tuple[str, ...], where: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in schemes or not parsed.netloc:
        raise ConfigError(
            f"Invalid URL '{url}' in {where} (expected {' or '.join(schemes)})"
        )
    return url


class ConfigLoader:
    """Loads and validates the bridge configuration file."""

    def __init__(self, config_file: str = DEFAULT_CONFIG_PATH):
        self.config_file = self._resolve_path(config_file)

    @staticmethod
    def _resolve_path(config_file: str) -> Path:
        path = Path(config_file).expanduser()
        if not path.is_absolute():
            path = Path.cwd() / path
        return path

    def load(self) -> Config:
        """Read, parse and validate the configuration file."""
        logger.debug("Loading config file", file=str(self.config_file))
        content = self._read_file(self.config_file)
        config = self._parse_config(content)
        logger.debug(
            "Config loaded",
            file=str(self.config_file),
            backend=config.backend.value,
            timeout=config.timeout,
            has_admin_group=config.admin_group_name is not None,
            has_user_group=config.user_group_name is not None,
        )
        return config

    def _read_file(self, config_file: Path) -> dict[str, Any]:
        try:
            if config_file.suffix in (".yaml", ".yml"):
                with open(config_file) as f:
                    content = yaml.safe_load(f)
            else:
                with open(config_file, "rb") as f:
                    content = tomllib.load(f)
        except OSError as e:
            raise ConfigError(
                f"Unable to read config file at {config_file}: {e.strerror}"
            ) from e
        except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to parse config file {config_file}: {e}") from e

        if content is None:
            content = {}
        if not isinstance(content, dict):
            raise ConfigError(f"Config file {config_file} must contain a table/mapping")
        return content

    def _parse_config(self, content: dict[str, Any]) -> Config:
        where = str(self.config_file)

        timeout = content.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            raise ConfigError(f"'timeout' in {where} must be a positive integer")

        admin_group_name = _optional_str(content, "admin_group_name", where)
        user_group_name = _optional_str(content, "user_group_name", where)

        backend_value = content.get("backend")
        if backend_value is None:
            # Flat layout with the flow settings at top level
            if "authentik_base_url" in content:
                flow = self._parse_flow(
                    {
                        "base_url": content.get("authentik_base_url"),
                        "flow_slug": content.get("flow_slug"),
                        "ca_cert_path": content.get("ca_cert_path"),
                        "verify_tls": content.get("verify_tls", True),
                    },
                    where,
                )
                return Config(
                    backend=BackendKind.FLOW,
                    timeout=timeout,
                    admin_group_name=admin_group_name,
                    user_group_name=user_group_name,
                    flow=flow,
                )
            raise ConfigError(f"Missing 'backend' in {where}")

        try:
            backend = BackendKind(str(backend_value).lower())
        except ValueError:
            valid = ", ".join(kind.value for kind in BackendKind)
            raise ConfigError(
                f"Unknown backend '{backend_value}' in {where} (expected one of: {valid})"
            ) from None

        section = content.get(backend.value)
        if not isinstance(section, dict):
            raise ConfigError(f"Missing [{backend.value}] section in {where}")

        flow = None
        directory = None
        if backend == BackendKind.FLOW:
            flow = self._parse_flow(section, f"[flow] of {where}")
        else:
            directory = self._parse_directory(section, f"[directory] of {where}")

        return Config(
            backend=backend,
            timeout=timeout,
            admin_group_name=admin_group_name,
            user_group_name=user_group_name,
            flow=flow,
            directory=directory,
        )

    def _parse_flow(self, section: dict[str, Any], where: str) -> FlowSettings:
        base_url = _check_url(
            _require_str(section, "base_url", where), ("http", "https"), where
        )
        return FlowSettings(
            base_url=base_url.rstrip("/"),
            flow_slug=_require_str(section, "flow_slug", where),
            ca_cert_path=_optional_str(section, "ca_cert_path", where),
            verify_tls=_bool(section, "verify_tls", where, True),
        )

    def _parse_directory(self, section: dict[str, Any], where: str) -> DirectorySettings:
        return DirectorySettings(
            url=_check_url(_require_str(section, "url", where), ("ldap", "ldaps"), where),
            bind_dn=_require_str(section, "bind_dn", where),
            bind_password=_require_str(section, "bind_password", where),
            user_base_dn=_require_str(section, "user_base_dn", where),
            username_attribute=_optional_str(section, "username_attribute", where) or "cn",
            group_attribute=_optional_str(section, "group_attribute", where) or "memberOf",
            group_prefix=_str_or_default(section, "group_prefix", where, "cn="),
            ca_cert_path=_optional_str(section, "ca_cert_path", where),
            verify_tls=_bool(section, "verify_tls", where, True),
        )


def get_config_loader(config_file: str | None = None) -> ConfigLoader:
    """Get a config loader for the given path, $AUTHBRIDGE_CONFIG, or config.toml."""
    path = config_file or os.getenv("AUTHBRIDGE_CONFIG", DEFAULT_CONFIG_PATH)
    return ConfigLoader(path)
