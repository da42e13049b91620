"""Unit tests for authentication backend selection."""

import ssl

import pytest

from authbridge.auth.backends import create_backend
from authbridge.auth.directory import DirectoryBindBackend
from authbridge.auth.flow import FlowChallengeBackend
from authbridge.config import BackendKind, Config, DirectorySettings, FlowSettings
from authbridge.errors import ConfigError

FLOW = FlowSettings(base_url="https://auth.example.com", flow_slug="login")
DIRECTORY = DirectorySettings(
    url="ldap://ldap.example.com",
    bind_dn="cn=service,dc=example,dc=com",
    bind_password="secret",
    user_base_dn="ou=users,dc=example,dc=com",
    username_attribute="uid",
)


def test_create_flow_backend() -> None:
    """Test the flow selector builds a flow backend."""
    backend = create_backend(Config(backend=BackendKind.FLOW, timeout=4, flow=FLOW))

    assert isinstance(backend, FlowChallengeBackend)
    assert backend.base_url == "https://auth.example.com"
    assert backend.flow_slug == "login"
    assert backend.timeout == 4
    assert backend.verify is True


def test_create_flow_backend_without_tls_verification() -> None:
    """Test TLS verification can be switched off for the flow backend."""
    flow = FlowSettings(
        base_url="https://auth.example.com", flow_slug="login", verify_tls=False
    )
    backend = create_backend(Config(backend=BackendKind.FLOW, flow=flow))

    assert isinstance(backend, FlowChallengeBackend)
    assert backend.verify is False


def test_create_directory_backend() -> None:
    """Test the directory selector builds a directory backend."""
    backend = create_backend(
        Config(backend=BackendKind.DIRECTORY, timeout=6, directory=DIRECTORY)
    )

    assert isinstance(backend, DirectoryBindBackend)
    assert backend.url == "ldap://ldap.example.com"
    assert backend.username_attribute == "uid"
    assert backend.timeout == 6
    assert backend.tls is None


def test_create_directory_backend_with_ldaps() -> None:
    """Test ldaps URLs get a TLS configuration."""
    directory = DirectorySettings(
        url="ldaps://ldap.example.com:636",
        bind_dn="cn=service,dc=example,dc=com",
        bind_password="secret",
        user_base_dn="ou=users,dc=example,dc=com",
        verify_tls=False,
    )
    backend = create_backend(Config(backend=BackendKind.DIRECTORY, directory=directory))

    assert isinstance(backend, DirectoryBindBackend)
    assert backend.tls is not None
    assert backend.tls.validate == ssl.CERT_NONE


def test_create_directory_backend_with_missing_ca_file(tmp_path) -> None:
    """Test a missing LDAP CA file is reported as a config error."""
    directory = DirectorySettings(
        url="ldaps://ldap.example.com:636",
        bind_dn="cn=service,dc=example,dc=com",
        bind_password="secret",
        user_base_dn="ou=users,dc=example,dc=com",
        ca_cert_path=str(tmp_path / "missing-ca.pem"),
    )

    with pytest.raises(ConfigError, match="CA certificate"):
        create_backend(Config(backend=BackendKind.DIRECTORY, directory=directory))


def test_create_flow_backend_with_missing_ca_file(tmp_path) -> None:
    """Test a missing flow CA file is reported as a config error."""
    flow = FlowSettings(
        base_url="https://auth.example.com",
        flow_slug="login",
        ca_cert_path=str(tmp_path / "missing-ca.pem"),
    )

    with pytest.raises(ConfigError, match="CA certificate"):
        create_backend(Config(backend=BackendKind.FLOW, flow=flow))


def test_only_selected_backend_is_built() -> None:
    """Test having both sections configured still builds one backend."""
    config = Config(backend=BackendKind.FLOW, flow=FLOW, directory=DIRECTORY)

    assert isinstance(create_backend(config), FlowChallengeBackend)


def test_missing_settings() -> None:
    """Test a selector without its settings is a configuration error."""
    with pytest.raises(ConfigError, match="flow settings"):
        create_backend(Config(backend=BackendKind.FLOW))

    with pytest.raises(ConfigError, match="directory settings"):
        create_backend(Config(backend=BackendKind.DIRECTORY))
