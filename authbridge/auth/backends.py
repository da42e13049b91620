"""Authentication backend selection."""

import ssl

import structlog
from ldap3 import Tls
from ldap3.core.exceptions import LDAPException

from ..client import build_verify
from ..config import BackendKind, Config, DirectorySettings
from ..errors import ConfigError
from .directory import DirectoryBindBackend
from .flow import FlowChallengeBackend
from .models import AuthBackend

logger = structlog.get_logger()


def _directory_tls(settings: DirectorySettings) -> Tls | None:
    if not settings.url.lower().startswith("ldaps://") and not settings.ca_cert_path:
        return None
    if not settings.verify_tls:
        logger.warning(
            "LDAP certificate verification disabled - this is insecure and should only be used for development"
        )
    try:
        return Tls(
            validate=ssl.CERT_REQUIRED if settings.verify_tls else ssl.CERT_NONE,
            ca_certs_file=settings.ca_cert_path,
        )
    except LDAPException as e:
        raise ConfigError(
            f"Unable to load CA certificate {settings.ca_cert_path}: {e}"
        ) from e


def create_backend(config: Config) -> AuthBackend:
    """Build the single backend selected by the configuration."""
    if config.backend == BackendKind.FLOW:
        if config.flow is None:
            raise ConfigError("Flow backend selected without flow settings")
        logger.debug(
            "Using flow authentication backend",
            base_url=config.flow.base_url,
            flow_slug=config.flow.flow_slug,
        )
        return FlowChallengeBackend(
            base_url=config.flow.base_url,
            flow_slug=config.flow.flow_slug,
            timeout=config.timeout,
            verify=build_verify(config.flow.ca_cert_path, config.flow.verify_tls),
        )

    if config.backend == BackendKind.DIRECTORY:
        if config.directory is None:
            raise ConfigError("Directory backend selected without directory settings")
        settings = config.directory
        logger.debug(
            "Using directory authentication backend",
            url=settings.url,
            user_base_dn=settings.user_base_dn,
        )
        return DirectoryBindBackend(
            url=settings.url,
            bind_dn=settings.bind_dn,
            bind_password=settings.bind_password,
            user_base_dn=settings.user_base_dn,
            username_attribute=settings.username_attribute,
            group_attribute=settings.group_attribute,
            group_prefix=settings.group_prefix,
            timeout=config.timeout,
            tls=_directory_tls(settings),
        )

    raise ConfigError(f"Unsupported backend: {config.backend}")
