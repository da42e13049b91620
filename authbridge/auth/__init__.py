from typing import Any

from .models import (
    AuthBackend,
    DirectoryUser,
    LoginResult,
    Role,
    RoleDecision,
    UserInfo,
)


# Import backends lazily to avoid circular imports with the HTTP client
def __getattr__(name: str) -> Any:
    if name == "FlowChallengeBackend":
        from .flow import FlowChallengeBackend

        return FlowChallengeBackend
    if name == "DirectoryBindBackend":
        from .directory import DirectoryBindBackend

        return DirectoryBindBackend
    if name == "AuthenticationFacade":
        from .facade import AuthenticationFacade

        return AuthenticationFacade
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "AuthBackend",
    "AuthenticationFacade",
    "DirectoryBindBackend",
    "DirectoryUser",
    "FlowChallengeBackend",
    "LoginResult",
    "Role",
    "RoleDecision",
    "UserInfo",
]
