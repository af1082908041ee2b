"""Capability checks: (actor role, action, owner) -> allow/deny"""

import enum
from typing import Optional
from uuid import UUID

from campus_dining.errors import Forbidden
from campus_dining.models.user import User, UserRole


class Action(str, enum.Enum):
    PLACE_ORDER = "place_order"
    LIST_OWN_ORDERS = "list_own_orders"
    VIEW_ORDER = "view_order"
    EDIT_ORDER = "edit_order"
    CANCEL_ORDER = "cancel_order"
    LIST_ALL_ORDERS = "list_all_orders"
    ADVANCE_STATUS = "advance_status"
    VIEW_FULL_MENU = "view_full_menu"
    TOGGLE_AVAILABILITY = "toggle_availability"
    MANAGE_MENU = "manage_menu"
    MANAGE_USERS = "manage_users"
    VIEW_REPORTS = "view_reports"
    ARCHIVE_ORDERS = "archive_orders"
    MANAGE_ORDERS = "manage_orders"


OWN = "own"
ANY = "any"

_STAFF_CAPABILITIES = {
    Action.VIEW_ORDER: ANY,
    Action.CANCEL_ORDER: ANY,
    Action.LIST_ALL_ORDERS: ANY,
    Action.ADVANCE_STATUS: ANY,
    Action.VIEW_FULL_MENU: ANY,
    Action.TOGGLE_AVAILABILITY: ANY,
}

CAPABILITIES = {
    UserRole.STUDENT: {
        Action.PLACE_ORDER: OWN,
        Action.LIST_OWN_ORDERS: OWN,
        Action.VIEW_ORDER: OWN,
        Action.EDIT_ORDER: OWN,
        Action.CANCEL_ORDER: OWN,
    },
    UserRole.STAFF: dict(_STAFF_CAPABILITIES),
    UserRole.MANAGER: {
        **_STAFF_CAPABILITIES,
        Action.MANAGE_MENU: ANY,
        Action.MANAGE_USERS: ANY,
        Action.VIEW_REPORTS: ANY,
        Action.ARCHIVE_ORDERS: ANY,
        Action.MANAGE_ORDERS: ANY,
    },
}


def is_allowed(
    role: UserRole,
    action: Action,
    actor_id: Optional[UUID] = None,
    owner_id: Optional[UUID] = None,
) -> bool:
    """
    Decide whether a role may perform an action.

    When ``owner_id`` is omitted only the role is checked; owner-scoped
    grants then require the caller to check ownership once the resource
    is loaded.
    """
    scope = CAPABILITIES.get(role, {}).get(action)
    if scope is None:
        return False
    if scope == OWN and owner_id is not None:
        return actor_id is not None and actor_id == owner_id
    return True


def ensure_allowed(actor: User, action: Action, owner_id: Optional[UUID] = None) -> None:
    """Raise Forbidden unless the actor may perform the action"""
    if not is_allowed(actor.role, action, actor.id, owner_id):
        raise Forbidden()
