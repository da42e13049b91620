"""Flow executor (challenge-response) authentication backend."""

import ssl
from typing import Any

import httpx
import structlog

from ..client import FlowExecutorClient
from ..errors import InactiveAccountError, ProtocolShapeError, UnexpectedStageError
from .models import UserInfo
from .stages import (
    AccessDeniedStage,
    IdentificationStage,
    RedirectStage,
    stage_name,
)

logger = structlog.get_logger()

USERNAME_FIELD = "username"


class FlowChallengeBackend:
    """Authenticates users by walking an identity provider's login flow.

    One call runs a single pass through the flow: fetch the identification
    challenge, answer it with the username and password, and on a redirect read
    the logged-in user's profile. There are no retries.
    """

    def __init__(
        self,
        base_url: str,
        flow_slug: str,
        timeout: float = 10,
        verify: ssl.SSLContext | bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the flow backend.

        Args:
            base_url: Identity provider base URL, without the /api/v3 suffix
            flow_slug: Slug of the authentication flow to execute
            timeout: Timeout in seconds applied to every request
            verify: TLS verification setting passed to httpx
            transport: Optional httpx transport, used by tests
        """
        self.base_url = base_url.rstrip("/")
        self.flow_slug = flow_slug
        self.timeout = timeout
        self.verify = verify
        self.transport = transport

    def _client(self) -> FlowExecutorClient:
        return FlowExecutorClient(
            self.base_url,
            self.flow_slug,
            timeout=self.timeout,
            verify=self.verify,
            transport=self.transport,
        )

    async def authenticate(self, username: str, password: str) -> UserInfo | None:
        """Run the login flow for the given credentials.

        Returns:
            UserInfo for an active user who completed the flow, None if the flow
            denied access

        Raises:
            UnexpectedStageError: flow returned a stage out of sequence
            ProtocolShapeError: identification stage cannot take a password login
            InactiveAccountError: credentials valid but the account is disabled
            UpstreamTimeoutError, UpstreamTransportError: network failures
        """
        # One client per attempt so the cookie jar ties both round trips together
        async with self._client() as client:
            stage = await client.get_stage()
            logger.debug("Received first flow stage", stage=stage_name(stage))

            if isinstance(stage, AccessDeniedStage):
                logger.info(
                    "Flow denied access before identification",
                    username=username,
                    reason=stage.error_message,
                )
                return None

            if not isinstance(stage, IdentificationStage):
                raise UnexpectedStageError(
                    f"Expected an identification stage, got {stage_name(stage)}",
                    component=stage_name(stage),
                )

            self._check_identification_stage(stage)

            result = await client.solve_identification(stage, username, password)
            logger.debug("Received flow stage after identification", stage=stage_name(result))

            if isinstance(result, AccessDeniedStage):
                logger.info(
                    "Flow denied access",
                    username=username,
                    reason=result.error_message,
                )
                return None

            if not isinstance(result, RedirectStage):
                raise UnexpectedStageError(
                    f"Not a successful login stage: {stage_name(result)}",
                    component=stage_name(result),
                )

            profile = await client.get_profile()

        return self._user_from_profile(profile, username)

    def _check_identification_stage(self, stage: IdentificationStage) -> None:
        """Make sure the stage accepts a username and password in one step."""
        if stage.user_fields is None:
            raise ProtocolShapeError("Identification stage has no user fields")
        if USERNAME_FIELD not in stage.user_fields:
            raise ProtocolShapeError(
                f"Identification stage does not accept a username "
                f"(fields: {sorted(stage.user_fields)})"
            )
        if not stage.password_fields:
            raise ProtocolShapeError("Identification stage has no password field")

    def _user_from_profile(self, profile: dict[str, Any], username: str) -> UserInfo:
        try:
            user = profile["user"]
            display_name = user["name"]
            is_active = user["is_active"]
            groups = frozenset(group["name"] for group in user.get("groups") or [])
        except (KeyError, TypeError) as e:
            raise ProtocolShapeError(f"User profile is missing data: {e}") from e

        if not is_active:
            logger.warning("Authenticated account is inactive", username=username)
            raise InactiveAccountError(f"User {username} is not active")

        logger.info(
            "Flow authentication successful",
            username=username,
            groups_count=len(groups),
        )
        return UserInfo(display_name=display_name, groups=groups)
