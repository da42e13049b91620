"""Authentication models and types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


@dataclass(frozen=True)
class UserInfo:
    """Authenticated user as reported by a backend."""

    display_name: str
    groups: frozenset[str] = field(default_factory=frozenset)


@dataclass
class DirectoryUser:
    """User entry read from the directory."""

    uid: str
    cn: str
    sn: str
    mail: str
    display_name: str
    member_of: list[str] = field(default_factory=list)


class Role(Enum):
    """Coarse role granted to an authenticated user."""

    ADMIN = "admin"
    USER = "user"
    NONE = "none"


@dataclass(frozen=True)
class RoleDecision:
    """Outcome of role resolution."""

    role: Role
    accepted: bool


@dataclass(frozen=True)
class LoginResult:
    """Accepted login, ready to be rendered for the host."""

    display_name: str
    role: Role


class AuthBackend(Protocol):
    """Protocol for authentication backends."""

    async def authenticate(self, username: str, password: str) -> UserInfo | None:
        """Check credentials and return user info, or None if they are rejected."""
        ...
