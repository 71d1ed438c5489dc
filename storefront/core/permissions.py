# storefront/core/permissions.py
"""
Role hierarchy and permission sets.

Two ways of expressing a requirement are supported by the same policy
function:

  - a role name ("admin"): granted iff the caller's role ranks at least as
    high (client < admin < superadmin)
  - a permission name, or a list of them: granted iff the caller's
    permission set contains it (for a list, ANY of them)

Every check fails closed: no role, no requirement => deny.
"""

from collections.abc import Iterable

from storefront.core.errors import AccessDenied, UnknownRole

CLIENT = "client"
ADMIN = "admin"
SUPERADMIN = "superadmin"

ROLE_RANKS: dict[str, int] = {
    CLIENT: 1,
    ADMIN: 2,
    SUPERADMIN: 3,
}

CLIENT_PERMISSIONS = frozenset(
    {
        "view_products",
        "manage_own_profile",
        "place_orders",
        "view_own_orders",
        "manage_cart",
    }
)

ADMIN_PERMISSIONS = CLIENT_PERMISSIONS | {
    "manage_products",
    "view_all_orders",
    "update_order_status",
    "view_clients",
    "manage_clients",
}

SUPERADMIN_PERMISSIONS = ADMIN_PERMISSIONS | {
    "manage_admins",
    "view_analytics",
    "manage_site_settings",
    "manage_permissions",
    "system_backup",
    "system_restore",
}

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    CLIENT: CLIENT_PERMISSIONS,
    ADMIN: ADMIN_PERMISSIONS,
    SUPERADMIN: SUPERADMIN_PERMISSIONS,
}

ALL_PERMISSIONS = SUPERADMIN_PERMISSIONS

Requirement = str | Iterable[str] | None


def role_rank(role: str) -> int:
    try:
        return ROLE_RANKS[role]
    except KeyError:
        raise UnknownRole(f"Unknown role: {role}") from None


def permissions_for_role(role: str) -> frozenset[str]:
    """Fixed permission set derived from a role."""
    role_rank(role)
    return ROLE_PERMISSIONS[role]


def effective_permissions(
    role: str,
    overrides: Iterable[str] | None = None,
) -> frozenset[str]:
    """
    Permission set for a principal: the per-user override when one is
    stored, otherwise the set derived from the role. A superadmin always
    holds every permission, matching the check in `has_permission`.
    """
    role_rank(role)
    if role == SUPERADMIN:
        return ALL_PERMISSIONS
    if overrides is None:
        return ROLE_PERMISSIONS[role]
    return frozenset(p for p in overrides if p in ALL_PERMISSIONS)


def has_role(role: str | None, required_role: str) -> bool:
    if not role:
        return False
    return role_rank(role) >= role_rank(required_role)


def has_permission(
    role: str | None,
    requested: str | Iterable[str],
    overrides: Iterable[str] | None = None,
) -> bool:
    """
    True iff the role's permission set contains `requested` or, for a list,
    intersects it.
    """
    if not role:
        return False
    rank = role_rank(role)

    wanted = {requested} if isinstance(requested, str) else set(requested)
    wanted &= ALL_PERMISSIONS
    if not wanted:
        return False

    # Superadmin holds every known permission, whatever its override says.
    if rank == ROLE_RANKS[SUPERADMIN]:
        return True

    return not wanted.isdisjoint(effective_permissions(role, overrides))


def has_access(
    role: str | None,
    requirement: Requirement,
    permissions: Iterable[str] | None = None,
) -> bool:
    """
    Single policy entry point used by every route guard.

    Args:
        role: the caller's role; None for guests or profiles without a role.
        requirement: a role name, a permission name, or a list of
            permission names (ANY-of).
        permissions: optional per-user permission override.

    Raises:
        UnknownRole: if `role` is set but outside the closed role set.
    """
    if not role or not requirement:
        return False
    role_rank(role)

    if isinstance(requirement, str) and requirement in ROLE_RANKS:
        return has_role(role, requirement)

    return has_permission(role, requirement, permissions)


def ensure_access(
    role: str | None,
    requirement: Requirement,
    permissions: Iterable[str] | None = None,
) -> None:
    """Raise AccessDenied unless `has_access` grants the requirement."""
    if requirement is not None and not isinstance(requirement, str):
        requirement = tuple(requirement)
    if has_access(role, requirement, permissions):
        return

    if isinstance(requirement, str):
        wanted = requirement
    else:
        wanted = ", ".join(sorted(requirement or ()))
    raise AccessDenied(f"Not authorized, requires {wanted or 'a requirement'}")
