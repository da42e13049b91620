"""Error taxonomy for the authentication bridge.

Every failure that is not an ordinary credential rejection is raised as one of
these exceptions and propagates unchanged to the command-line entry point.
"""


class AuthBridgeError(Exception):
    """Base exception for authentication bridge errors."""

    pass


class ConfigError(AuthBridgeError):
    """Configuration file is missing, unreadable or malformed."""

    pass


class ProtocolShapeError(AuthBridgeError):
    """Upstream response is missing fields the protocol requires."""

    pass


class UnexpectedStageError(AuthBridgeError):
    """Challenge flow returned a stage that does not fit the expected sequence."""

    def __init__(self, message: str, component: str | None = None):
        super().__init__(message)
        self.component = component


class UpstreamError(AuthBridgeError):
    """Base exception for failures talking to an upstream identity system."""

    pass


class UpstreamTimeoutError(UpstreamError):
    """Upstream operation exceeded the configured timeout."""

    pass


class UpstreamTransportError(UpstreamError):
    """Upstream operation failed at the transport or response level."""

    pass


class InactiveAccountError(AuthBridgeError):
    """Credentials were accepted but the account is disabled."""

    pass


class DataIntegrityError(AuthBridgeError):
    """Directory entry matched but lacks a mandatory attribute."""

    pass


class UnknownResultCodeError(AuthBridgeError):
    """Directory returned a result code outside the known registry."""

    def __init__(self, code: int | None):
        super().__init__(f"Unknown LDAP result code: {code}")
        self.code = code


class RoleRejectionError(AuthBridgeError):
    """Credentials are valid but the user matches no configured role group."""

    pass
