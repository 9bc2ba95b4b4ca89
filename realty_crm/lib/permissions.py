"""
Role-based permission rules.

Roles come from the employees table. Older rows may still carry the legacy
names "manager" and "staff", which map to developer and agent.
"""
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from realty_crm.lib.errors import AuthorizationDenied


class Role(str, Enum):
    ADMIN = "admin"
    DEVELOPER = "developer"
    AGENT = "agent"


ROLE_ALIASES = {
    "admin": Role.ADMIN,
    "developer": Role.DEVELOPER,
    "manager": Role.DEVELOPER,
    "agent": Role.AGENT,
    "staff": Role.AGENT,
}


def parse_role(value: str) -> Role:
    """Map a stored role name to a Role, treating unknown names as agent."""
    return ROLE_ALIASES.get((value or "").strip().lower(), Role.AGENT)


@dataclass(frozen=True)
class CallerContext:
    """Identity of the caller, resolved once per request."""
    user_id: UUID
    employee_id: UUID
    organization_id: UUID
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_agent(self) -> bool:
        return self.role == Role.AGENT


EDITOR_ROLES = (Role.DEVELOPER, Role.ADMIN)
ALL_ROLES = (Role.AGENT, Role.DEVELOPER, Role.ADMIN)


def can_create_project(role: Role) -> bool:
    return role in EDITOR_ROLES


def can_edit_project(role: Role) -> bool:
    return role in EDITOR_ROLES


def can_delete_project(role: Role) -> bool:
    return role in EDITOR_ROLES


def can_manage_units(role: Role) -> bool:
    return role in EDITOR_ROLES


def can_manage_promotions(role: Role) -> bool:
    return role in EDITOR_ROLES


def can_edit_leads(role: Role) -> bool:
    return role in EDITOR_ROLES


def can_delete_leads(role: Role) -> bool:
    return role in EDITOR_ROLES


def can_view_leads(role: Role) -> bool:
    return role in ALL_ROLES


def can_create_leads(role: Role) -> bool:
    return role in ALL_ROLES


def can_access_admin(role: Role) -> bool:
    return role == Role.ADMIN


def require(allowed: bool, message: str) -> None:
    """Raise AuthorizationDenied unless the check passed."""
    if not allowed:
        raise AuthorizationDenied(message)
