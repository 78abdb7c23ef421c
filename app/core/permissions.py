# app/core/permissions.py
from enum import Enum
from typing import Any

from app.core.errors import AuthorizationError
from app.models.user import User


class Action(str, Enum):
    """Things an actor can attempt against a resource."""

    READ = "read"
    CANCEL = "cancel"
    MUTATE_CART = "mutate_cart"
    CHECKOUT = "checkout"
    LIST_ALL = "list_all"
    UPDATE_STATUS = "update_status"
    MANAGE_CATALOG = "manage_catalog"
    MANAGE_USERS = "manage_users"
    MANAGE_PURCHASES = "manage_purchases"
    WRITE_REVIEW = "write_review"
    DELETE = "delete"


# Actions a customer may take on resources they own.
OWNER_ACTIONS: frozenset[Action] = frozenset(
    {Action.READ, Action.CANCEL, Action.MUTATE_CART, Action.CHECKOUT, Action.DELETE}
)

# Actions that need no resource and are open to any authenticated user.
SELF_SERVICE_ACTIONS: frozenset[Action] = frozenset(
    {Action.MUTATE_CART, Action.CHECKOUT, Action.WRITE_REVIEW}
)


def _owner_of(resource: Any) -> str | None:
    """
    Resolve the owning user id of a resource.

    Users own themselves; carts, orders, purchases and reviews carry `user_id`.
    """
    if isinstance(resource, User):
        return resource.id
    return getattr(resource, "user_id", None)


def is_allowed(actor: User | None, action: Action, resource: Any = None) -> bool:
    if actor is None:
        return False
    if actor.role == "admin":
        return True
    if resource is None:
        return action in SELF_SERVICE_ACTIONS
    return action in OWNER_ACTIONS and _owner_of(resource) == actor.id


def authorize(actor: User | None, action: Action, resource: Any = None) -> None:
    """
    Single authorization gate used at each service entry point.

    Raises:
        AuthorizationError(403): when the policy denies the action.
    """
    if not is_allowed(actor, action, resource):
        if resource is None and action not in SELF_SERVICE_ACTIONS:
            raise AuthorizationError("Admin access required")
        raise AuthorizationError("You do not have access to this resource")
