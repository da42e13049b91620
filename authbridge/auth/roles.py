"""Role resolution from group memberships."""

from collections.abc import Iterable

from .models import Role, RoleDecision


def resolve_role(
    groups: Iterable[str],
    admin_group_name: str | None = None,
    user_group_name: str | None = None,
) -> RoleDecision:
    """Decide the role and acceptance for a user with the given groups.

    Admin membership wins over user membership. With no role group configured,
    every authenticated user is accepted without a role. With at least one
    configured, a user in none of them is rejected.
    """
    member_of = set(groups)

    if admin_group_name and admin_group_name in member_of:
        return RoleDecision(Role.ADMIN, True)
    if user_group_name and user_group_name in member_of:
        return RoleDecision(Role.USER, True)
    if not admin_group_name and not user_group_name:
        return RoleDecision(Role.NONE, True)
    return RoleDecision(Role.NONE, False)
