"""Unit tests for the authentication facade."""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from authbridge.auth.facade import AuthenticationFacade
from authbridge.auth.models import LoginResult, Role, UserInfo
from authbridge.config import BackendKind, Config, FlowSettings
from authbridge.errors import RoleRejectionError, UpstreamTimeoutError


def make_backend(user: UserInfo | None) -> Mock:
    backend = Mock()
    backend.authenticate = AsyncMock(return_value=user)
    return backend


class TestAuthenticationFacade:
    """Test AuthenticationFacade.login."""

    @pytest.mark.asyncio
    async def test_admin_login(self) -> None:
        """Test an admin group member logs in as admin."""
        backend = make_backend(UserInfo("Jane Doe", frozenset({"admins"})))
        facade = AuthenticationFacade(backend, "admins", "users")

        result = await facade.login("jdoe", "s3cret")

        assert result == LoginResult(display_name="Jane Doe", role=Role.ADMIN)
        backend.authenticate.assert_awaited_once_with("jdoe", "s3cret")

    @pytest.mark.asyncio
    async def test_user_login(self) -> None:
        """Test a user group member logs in as user."""
        facade = AuthenticationFacade(
            make_backend(UserInfo("Jane Doe", frozenset({"users"}))), "admins", "users"
        )

        result = await facade.login("jdoe", "s3cret")

        assert result is not None
        assert result.role == Role.USER

    @pytest.mark.asyncio
    async def test_no_role_policy(self) -> None:
        """Test any authenticated user is accepted without role groups."""
        facade = AuthenticationFacade(make_backend(UserInfo("Jane Doe")))

        result = await facade.login("jdoe", "s3cret")

        assert result == LoginResult(display_name="Jane Doe", role=Role.NONE)

    @pytest.mark.asyncio
    async def test_rejected_credentials(self) -> None:
        """Test a backend rejection returns None."""
        facade = AuthenticationFacade(make_backend(None), "admins", "users")

        assert await facade.login("jdoe", "wrong") is None

    @pytest.mark.asyncio
    async def test_role_rejection(self) -> None:
        """Test valid credentials outside every role group are rejected."""
        facade = AuthenticationFacade(
            make_backend(UserInfo("Jane Doe", frozenset({"guests"}))), "admins", "users"
        )

        with pytest.raises(RoleRejectionError):
            await facade.login("jdoe", "s3cret")

    @pytest.mark.asyncio
    async def test_backend_errors_propagate(self) -> None:
        """Test backend errors are not swallowed."""
        backend = Mock()
        backend.authenticate = AsyncMock(side_effect=UpstreamTimeoutError("timeout"))
        facade = AuthenticationFacade(backend)

        with pytest.raises(UpstreamTimeoutError):
            await facade.login("jdoe", "s3cret")

    def test_from_config(self) -> None:
        """Test the facade picks up role groups and the backend from config."""
        config = Config(
            backend=BackendKind.FLOW,
            admin_group_name="admins",
            user_group_name="users",
            flow=FlowSettings(base_url="https://auth.example.com", flow_slug="login"),
        )
        sentinel = Mock()

        with patch("authbridge.auth.facade.create_backend", return_value=sentinel) as mock_create:
            facade = AuthenticationFacade.from_config(config)

        mock_create.assert_called_once_with(config)
        assert facade.backend is sentinel
        assert facade.admin_group_name == "admins"
        assert facade.user_group_name == "users"
