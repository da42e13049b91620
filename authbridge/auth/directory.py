"""Directory (LDAP bind) authentication backend."""

import asyncio
import socket
from typing import Any

import structlog
from ldap3 import NONE, SUBTREE, Connection, Server, Tls
from ldap3.core.exceptions import LDAPException, LDAPResponseTimeoutError
from ldap3.utils.conv import escape_filter_chars
from ldap3.utils.dn import escape_rdn

from ..errors import (
    DataIntegrityError,
    UnknownResultCodeError,
    UpstreamTimeoutError,
    UpstreamTransportError,
)
from .models import DirectoryUser, UserInfo
from .result_codes import ResultCode, classify

logger = structlog.get_logger()

# (attribute name, DirectoryUser field) for the mandatory single-valued attributes
MANDATORY_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("uid", "uid"),
    ("cn", "cn"),
    ("sn", "sn"),
    ("mail", "mail"),
    ("displayName", "display_name"),
)

# Search outcomes that still carry a usable (possibly empty) entry list
_SEARCH_OK = (
    ResultCode.SUCCESS,
    ResultCode.NO_SUCH_OBJECT,
    ResultCode.SIZE_LIMIT_EXCEEDED,
)


def group_name_from_dn(dn: str, prefix: str = "cn=") -> str:
    """Reduce a group DN to the value of its leading component.

    ``cn=admins,ou=groups,dc=example,dc=com`` becomes ``admins``. This is a
    plain split on the first comma; escaped commas and multi-valued RDNs are
    not interpreted.
    """
    return dn.split(",", 1)[0].removeprefix(prefix)


def _first_value(value: Any) -> str | None:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value)


def _all_values(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _is_timeout(exc: LDAPException) -> bool:
    if isinstance(exc, LDAPResponseTimeoutError):
        return True
    cause = exc.__cause__ or exc.__context__
    if isinstance(cause, (socket.timeout, TimeoutError)):
        return True
    return "timed out" in str(exc).lower()


class DirectoryBindBackend:
    """Authenticates users against an LDAP directory.

    ``lookup`` finds the user with a service account and reads its attributes;
    ``verify`` checks the password by binding as the user. Every call opens its
    own connection and unbinds it before returning.
    """

    def __init__(
        self,
        url: str,
        bind_dn: str,
        bind_password: str,
        user_base_dn: str,
        username_attribute: str = "cn",
        group_attribute: str = "memberOf",
        group_prefix: str = "cn=",
        timeout: float = 10,
        tls: Tls | None = None,
    ):
        """Initialize the directory backend.

        Args:
            url: Directory URL (ldap://host:389 or ldaps://host:636)
            bind_dn: Service account DN used for searches
            bind_password: Service account password
            user_base_dn: Base DN under which users are searched and bound
            username_attribute: Attribute holding the login name
            group_attribute: Attribute listing group DNs
            group_prefix: Prefix stripped from the first component of group DNs
            timeout: Connect and receive timeout in seconds
            tls: Optional TLS configuration for ldaps
        """
        self.url = url
        self.bind_dn = bind_dn
        self.bind_password = bind_password
        self.user_base_dn = user_base_dn
        self.username_attribute = username_attribute
        self.group_attribute = group_attribute
        self.group_prefix = group_prefix
        self.timeout = timeout
        self.tls = tls

    @property
    def attributes(self) -> list[str]:
        """Attributes requested for every user search."""
        return [name for name, _ in MANDATORY_ATTRIBUTES] + [self.group_attribute]

    def user_dn(self, username: str) -> str:
        """DN used to bind as the given user."""
        return f"{self.username_attribute}={escape_rdn(username)},{self.user_base_dn}"

    def _server(self) -> Server:
        return Server(
            self.url,
            tls=self.tls,
            get_info=NONE,
            connect_timeout=self.timeout,
        )

    def _connection(self, user: str, password: str) -> Connection:
        return Connection(
            self._server(),
            user=user,
            password=password,
            receive_timeout=self.timeout,
            raise_exceptions=False,
            read_only=True,
        )

    def _release(self, conn: Connection) -> None:
        try:
            conn.unbind()
        except LDAPException as e:
            logger.debug("LDAP unbind failed", error=str(e))

    def _translate(self, exc: LDAPException, operation: str) -> Exception:
        if _is_timeout(exc):
            return UpstreamTimeoutError(
                f"LDAP {operation} timed out after {self.timeout}s"
            )
        return UpstreamTransportError(f"LDAP {operation} failed: {exc}")

    @staticmethod
    def _result_code(conn: Connection) -> ResultCode:
        code = (conn.result or {}).get("result")
        result_code = classify(code) if isinstance(code, int) else None
        if result_code is None:
            raise UnknownResultCodeError(code)
        return result_code

    def lookup(self, username: str) -> DirectoryUser | None:
        """Find exactly one user entry by username.

        Returns:
            DirectoryUser for a unique match, None for no match or several
            matches

        Raises:
            DataIntegrityError: matched entry lacks a mandatory attribute
            UnknownResultCodeError: directory returned an unmapped result code
            UpstreamTimeoutError, UpstreamTransportError: directory failures
        """
        conn = self._connection(self.bind_dn, self.bind_password)
        try:
            if not conn.bind():
                result_code = self._result_code(conn)
                raise UpstreamTransportError(
                    f"Service account bind failed: {result_code.description}"
                )

            search_filter = (
                f"({self.username_attribute}={escape_filter_chars(username)})"
            )
            logger.debug(
                "Searching directory for user",
                search_base=self.user_base_dn,
                search_filter=search_filter,
            )
            conn.search(
                search_base=self.user_base_dn,
                search_filter=search_filter,
                search_scope=SUBTREE,
                attributes=self.attributes,
                size_limit=2,
            )

            result_code = self._result_code(conn)
            if result_code not in _SEARCH_OK:
                raise UpstreamTransportError(
                    f"User search failed: {result_code.description}"
                )

            entries = [
                entry
                for entry in (conn.response or [])
                if entry.get("type") == "searchResEntry"
            ]
        except LDAPException as e:
            raise self._translate(e, "search") from e
        finally:
            self._release(conn)

        if not entries:
            logger.info("No directory entry found", username=username)
            return None

        if len(entries) > 1:
            logger.error(
                "Found more than one user with the same username",
                username=username,
                matches=len(entries),
            )
            return None

        return self._user_from_entry(entries[0], username)

    def _user_from_entry(self, entry: dict[str, Any], username: str) -> DirectoryUser:
        # Attribute names come back in whatever case the server uses
        attrs = {
            name.lower(): value for name, value in (entry.get("attributes") or {}).items()
        }

        values: dict[str, str] = {}
        missing = []
        for attr_name, field_name in MANDATORY_ATTRIBUTES:
            value = _first_value(attrs.get(attr_name.lower()))
            if value is None:
                missing.append(attr_name)
            else:
                values[field_name] = value

        if missing:
            logger.error(
                "Directory entry is missing mandatory attributes",
                username=username,
                dn=entry.get("dn"),
                missing=missing,
            )
            raise DataIntegrityError(
                f"Directory entry {entry.get('dn')} is missing attributes: {', '.join(missing)}"
            )

        member_of = [
            group_name_from_dn(dn, self.group_prefix)
            for dn in _all_values(attrs.get(self.group_attribute.lower()))
        ]
        return DirectoryUser(member_of=member_of, **values)

    def verify(self, username: str, password: str) -> bool:
        """Check a password by binding as the user.

        Returns:
            True if the bind succeeded, False for any known failure code

        Raises:
            UnknownResultCodeError: bind returned an unmapped result code
            UpstreamTimeoutError, UpstreamTransportError: directory failures
        """
        if not password:
            # An empty simple bind is an anonymous bind and would succeed
            logger.info("Rejecting empty password", username=username)
            return False

        bind_dn = self.user_dn(username)
        logger.debug("Checking authentication bind", bind_dn=bind_dn)

        conn = self._connection(bind_dn, password)
        try:
            conn.bind()
            result_code = self._result_code(conn)
        except LDAPException as e:
            raise self._translate(e, "bind") from e
        finally:
            self._release(conn)

        logger.debug(
            "Bind result",
            bind_dn=bind_dn,
            result_code=int(result_code),
            description=result_code.description,
        )
        return result_code is ResultCode.SUCCESS

    async def authenticate(self, username: str, password: str) -> UserInfo | None:
        """Look the user up, then verify the password.

        Unknown users, ambiguous matches and wrong passwords all return None.
        """
        user = await asyncio.to_thread(self.lookup, username)
        if user is None:
            return None

        if not await asyncio.to_thread(self.verify, username, password):
            logger.info("Directory bind rejected credentials", username=username)
            return None

        logger.info(
            "Directory authentication successful",
            username=username,
            groups_count=len(user.member_of),
        )
        return UserInfo(
            display_name=user.display_name or user.cn,
            groups=frozenset(user.member_of),
        )
