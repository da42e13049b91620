"""LDAP result codes as defined in RFC 4511 Appendix A.

See https://www.rfc-editor.org/rfc/rfc4511#appendix-A
"""

from enum import IntEnum


class ResultCode(IntEnum):
    """LDAP operation result codes."""

    SUCCESS = 0
    OPERATIONS_ERROR = 1
    PROTOCOL_ERROR = 2
    TIME_LIMIT_EXCEEDED = 3
    SIZE_LIMIT_EXCEEDED = 4
    COMPARE_FALSE = 5
    COMPARE_TRUE = 6
    AUTH_METHOD_NOT_SUPPORTED = 7
    STRONG_AUTH_REQUIRED = 8
    REFERRAL = 9
    ADMIN_LIMIT_EXCEEDED = 11
    UNAVAILABLE_CRITICAL_EXTENSION = 12
    CONFIDENTIALITY_REQUIRED = 13
    SASL_BIND_IN_PROGRESS = 14
    NO_SUCH_ATTRIBUTE = 16
    UNDEFINED_ATTRIBUTE_TYPE = 17
    INAPPROPRIATE_MATCHING = 18
    CONSTRAINT_VIOLATION = 19
    ATTRIBUTE_OR_VALUE_EXISTS = 20
    INVALID_ATTRIBUTE_SYNTAX = 21
    NO_SUCH_OBJECT = 32
    ALIAS_PROBLEM = 33
    INVALID_DN_SYNTAX = 34
    ALIAS_DEREFERENCING_PROBLEM = 36
    INAPPROPRIATE_AUTHENTICATION = 48
    INVALID_CREDENTIALS = 49
    INSUFFICIENT_ACCESS_RIGHTS = 50
    BUSY = 51
    UNAVAILABLE = 52
    UNWILLING_TO_PERFORM = 53
    LOOP_DETECT = 54
    NAMING_VIOLATION = 64
    OBJECT_CLASS_VIOLATION = 65
    NOT_ALLOWED_ON_NON_LEAF = 66
    NOT_ALLOWED_ON_RDN = 67
    ENTRY_ALREADY_EXISTS = 68
    OBJECT_CLASS_MODS_PROHIBITED = 69
    RESULTS_TOO_LARGE = 70
    AFFECTS_MULTIPLE_DSAS = 71
    OTHER = 80

    @property
    def description(self) -> str:
        """Human-readable description, for diagnostics only."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[ResultCode, str] = {
    ResultCode.SUCCESS: "Success",
    ResultCode.OPERATIONS_ERROR: "Operations Error",
    ResultCode.PROTOCOL_ERROR: "Protocol Error",
    ResultCode.TIME_LIMIT_EXCEEDED: "Time Limit Exceeded",
    ResultCode.SIZE_LIMIT_EXCEEDED: "Size Limit Exceeded",
    ResultCode.COMPARE_FALSE: "Compare False",
    ResultCode.COMPARE_TRUE: "Compare True",
    ResultCode.AUTH_METHOD_NOT_SUPPORTED: "Auth Method Not Supported",
    ResultCode.STRONG_AUTH_REQUIRED: "Strong Authentication Required",
    ResultCode.REFERRAL: "Referral",
    ResultCode.ADMIN_LIMIT_EXCEEDED: "Admin Limit Exceeded",
    ResultCode.UNAVAILABLE_CRITICAL_EXTENSION: "Unavailable Critical Extension",
    ResultCode.CONFIDENTIALITY_REQUIRED: "Confidentiality Required",
    ResultCode.SASL_BIND_IN_PROGRESS: "SASL Bind In Progress",
    ResultCode.NO_SUCH_ATTRIBUTE: "No Such Attribute",
    ResultCode.UNDEFINED_ATTRIBUTE_TYPE: "Undefined Attribute Type",
    ResultCode.INAPPROPRIATE_MATCHING: "Inappropriate Matching",
    ResultCode.CONSTRAINT_VIOLATION: "Constraint Violation",
    ResultCode.ATTRIBUTE_OR_VALUE_EXISTS: "Attribute Or Value Exists",
    ResultCode.INVALID_ATTRIBUTE_SYNTAX: "Invalid Attribute Syntax",
    ResultCode.NO_SUCH_OBJECT: "No Such Object",
    ResultCode.ALIAS_PROBLEM: "Alias Problem",
    ResultCode.INVALID_DN_SYNTAX: "Invalid DN Syntax",
    ResultCode.ALIAS_DEREFERENCING_PROBLEM: "Alias Dereferencing Problem",
    ResultCode.INAPPROPRIATE_AUTHENTICATION: "Inappropriate Authentication",
    ResultCode.INVALID_CREDENTIALS: "Invalid Credentials",
    ResultCode.INSUFFICIENT_ACCESS_RIGHTS: "Insufficient Access Rights",
    ResultCode.BUSY: "Busy",
    ResultCode.UNAVAILABLE: "Unavailable",
    ResultCode.UNWILLING_TO_PERFORM: "Unwilling To Perform",
    ResultCode.LOOP_DETECT: "Loop Detect",
    ResultCode.NAMING_VIOLATION: "Naming Violation",
    ResultCode.OBJECT_CLASS_VIOLATION: "Object Class Violation",
    ResultCode.NOT_ALLOWED_ON_NON_LEAF: "Not Allowed On Non-Leaf",
    ResultCode.NOT_ALLOWED_ON_RDN: "Not Allowed On RDN",
    ResultCode.ENTRY_ALREADY_EXISTS: "Entry Already Exists",
    ResultCode.OBJECT_CLASS_MODS_PROHIBITED: "Object Class Mods Prohibited",
    ResultCode.RESULTS_TOO_LARGE: "Results Too Large",
    ResultCode.AFFECTS_MULTIPLE_DSAS: "Affects Multiple DSAs",
    ResultCode.OTHER: "Other",
}

# 35 and 81+ are deliberately absent
_REGISTRY: dict[int, ResultCode] = {code.value: code for code in ResultCode}


def classify(code: int) -> ResultCode | None:
    """Map a numeric LDAP result code to its registry entry, or None if unmapped."""
    return _REGISTRY.get(code)
