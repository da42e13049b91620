"""Unit tests for challenge stage parsing."""

import pytest

from authbridge.auth.stages import (
    AccessDeniedStage,
    IdentificationStage,
    RedirectStage,
    UnknownStage,
    parse_stage,
    stage_name,
)
from authbridge.errors import ProtocolShapeError


def test_parse_identification_stage() -> None:
    """Test parsing an identification challenge."""
    stage = parse_stage(
        {
            "type": "native",
            "component": "ak-stage-identification",
            "user_fields": ["username", "email"],
            "password_fields": True,
            "flow_info": {"title": "Welcome"},
        }
    )

    assert isinstance(stage, IdentificationStage)
    assert stage.component == "ak-stage-identification"
    assert stage.user_fields == frozenset({"username", "email"})
    assert stage.password_fields is True


def test_parse_identification_stage_without_user_fields() -> None:
    """Test a null user_fields list is kept as None."""
    stage = parse_stage(
        {"component": "ak-stage-identification", "user_fields": None}
    )

    assert isinstance(stage, IdentificationStage)
    assert stage.user_fields is None
    assert stage.password_fields is False


@pytest.mark.parametrize("user_fields", [5, "username", {"username": True}, ["username", 7]])
def test_parse_identification_stage_with_malformed_user_fields(user_fields: object) -> None:
    """Test user_fields must be a list of strings when present."""
    with pytest.raises(ProtocolShapeError, match="user_fields"):
        parse_stage(
            {
                "component": "ak-stage-identification",
                "user_fields": user_fields,
                "password_fields": True,
            }
        )


@pytest.mark.parametrize("password_fields", ["false", 1, None])
def test_parse_identification_stage_with_malformed_password_fields(
    password_fields: object,
) -> None:
    """Test password_fields is not coerced to a boolean."""
    with pytest.raises(ProtocolShapeError, match="password_fields"):
        parse_stage(
            {
                "component": "ak-stage-identification",
                "user_fields": ["username"],
                "password_fields": password_fields,
            }
        )


def test_parse_access_denied_stage() -> None:
    """Test parsing an access denied challenge."""
    stage = parse_stage(
        {"component": "ak-stage-access-denied", "error_message": "Denied"}
    )

    assert stage == AccessDeniedStage(error_message="Denied")


def test_parse_redirect_stage() -> None:
    """Test parsing a redirect challenge."""
    stage = parse_stage({"component": "xak-flow-redirect", "to": "/if/user/"})

    assert stage == RedirectStage(to="/if/user/")


def test_parse_unknown_stage() -> None:
    """Test unrecognised components are kept as unknown stages."""
    payload = {"component": "ak-stage-authenticator-validate", "device_challenges": []}
    stage = parse_stage(payload)

    assert isinstance(stage, UnknownStage)
    assert stage.component == "ak-stage-authenticator-validate"
    assert stage.raw == payload
    assert stage_name(stage) == "ak-stage-authenticator-validate"


def test_parse_stage_without_component() -> None:
    """Test a body without a component becomes an unknown stage."""
    stage = parse_stage({"detail": "Not found."})

    assert isinstance(stage, UnknownStage)
    assert stage.component is None
    assert stage_name(stage) == "<no component>"


def test_parse_non_object_payload() -> None:
    """Test non-object payloads are rejected."""
    with pytest.raises(ProtocolShapeError, match="not an object"):
        parse_stage(["ak-stage-identification"])


def test_stage_name_for_known_stages() -> None:
    """Test stage names for known stage types."""
    assert stage_name(RedirectStage()) == "RedirectStage"
    assert stage_name(AccessDeniedStage()) == "AccessDeniedStage"
