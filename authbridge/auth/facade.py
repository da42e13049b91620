"""Login entry point combining a backend with the role policy."""

import structlog

from ..config import Config
from ..errors import RoleRejectionError
from .backends import create_backend
from .models import AuthBackend, LoginResult
from .roles import resolve_role

logger = structlog.get_logger()


class AuthenticationFacade:
    """Authenticates with one backend and applies the admin/user role policy."""

    def __init__(
        self,
        backend: AuthBackend,
        admin_group_name: str | None = None,
        user_group_name: str | None = None,
    ):
        self.backend = backend
        self.admin_group_name = admin_group_name
        self.user_group_name = user_group_name

    @classmethod
    def from_config(cls, config: Config) -> "AuthenticationFacade":
        return cls(
            create_backend(config),
            admin_group_name=config.admin_group_name,
            user_group_name=config.user_group_name,
        )

    async def login(self, username: str, password: str) -> LoginResult | None:
        """Authenticate and resolve the role.

        Returns None when the backend rejects the credentials and raises
        RoleRejectionError when the credentials are valid but no configured
        role group matches.
        """
        user = await self.backend.authenticate(username, password)
        if user is None:
            logger.warning("Did not successfully authenticate", username=username)
            return None

        decision = resolve_role(user.groups, self.admin_group_name, self.user_group_name)
        if not decision.accepted:
            logger.warning(
                "User is not a member of any required group",
                username=username,
                admin_group=self.admin_group_name,
                user_group=self.user_group_name,
            )
            raise RoleRejectionError(
                f"User {username} is not a member of any required group"
            )

        logger.info("Login accepted", username=username, role=decision.role.value)
        return LoginResult(display_name=user.display_name, role=decision.role)
