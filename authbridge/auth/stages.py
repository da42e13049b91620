"""Challenge stages returned by the flow executor.

The executor can in principle return any stage component. Only the ones this
bridge knows how to drive get their own type; everything else is kept as an
``UnknownStage`` so callers have to reject it explicitly.
"""

from dataclasses import dataclass, field
from typing import Any

from ..errors import ProtocolShapeError

IDENTIFICATION_COMPONENT = "ak-stage-identification"
ACCESS_DENIED_COMPONENT = "ak-stage-access-denied"
REDIRECT_COMPONENT = "xak-flow-redirect"


@dataclass(frozen=True)
class IdentificationStage:
    """Stage asking for a user identifier and optionally a password."""

    component: str
    user_fields: frozenset[str] | None
    password_fields: bool


@dataclass(frozen=True)
class AccessDeniedStage:
    """Terminal stage: the flow refused the user."""

    error_message: str | None = None


@dataclass(frozen=True)
class RedirectStage:
    """Terminal stage: the flow completed successfully."""

    to: str | None = None


@dataclass(frozen=True)
class UnknownStage:
    """Any stage this bridge does not handle."""

    component: str | None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


ChallengeStage = IdentificationStage | AccessDeniedStage | RedirectStage | UnknownStage


def _parse_identification(component: str, payload: dict[str, Any]) -> IdentificationStage:
    user_fields = payload.get("user_fields")
    if user_fields is not None and (
        not isinstance(user_fields, list)
        or not all(isinstance(name, str) for name in user_fields)
    ):
        raise ProtocolShapeError("Identification stage user_fields is not a list of strings")

    password_fields = payload.get("password_fields", False)
    if not isinstance(password_fields, bool):
        raise ProtocolShapeError("Identification stage password_fields is not a boolean")

    return IdentificationStage(
        component=component,
        user_fields=frozenset(user_fields) if user_fields is not None else None,
        password_fields=password_fields,
    )


def parse_stage(payload: Any) -> ChallengeStage:
    """Turn a flow executor JSON body into a challenge stage."""
    if not isinstance(payload, dict):
        raise ProtocolShapeError(
            f"Challenge response is not an object: {type(payload).__name__}"
        )

    component = payload.get("component")

    if component == IDENTIFICATION_COMPONENT:
        return _parse_identification(component, payload)
    if component == ACCESS_DENIED_COMPONENT:
        return AccessDeniedStage(error_message=payload.get("error_message"))
    if component == REDIRECT_COMPONENT:
        return RedirectStage(to=payload.get("to"))

    return UnknownStage(component=component, raw=payload)


def stage_name(stage: ChallengeStage) -> str:
    """Short name of a stage for log and error messages."""
    if isinstance(stage, UnknownStage):
        return stage.component or "<no component>"
    return type(stage).__name__
