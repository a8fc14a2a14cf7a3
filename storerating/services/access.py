"""
Access control — who may do what to which store, rating or user.

``authorize`` is a pure decision over an :class:`Identity`, an
:class:`Action` and (for ownership rules) the target resource. It never
reads or writes the database; callers load the resource first and then ask.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from storerating.core.exceptions import AuthorizationError, SelfRatingForbidden
from storerating.models.user import Role
from storerating.services.credentials import Identity


class Action(str, enum.Enum):
    MANAGE_USERS = "manage_users"
    VIEW_USERS = "view_users"
    MANAGE_STORES = "manage_stores"
    UPDATE_STORE = "update_store"
    REASSIGN_STORE_OWNER = "reassign_store_owner"
    VIEW_STORES = "view_stores"
    SUBMIT_RATING = "submit_rating"
    DELETE_RATING = "delete_rating"
    VIEW_STORE_RATINGS = "view_store_ratings"
    VIEW_USER_RATINGS = "view_user_ratings"
    VIEW_ADMIN_DASHBOARD = "view_admin_dashboard"
    VIEW_OWNER_DASHBOARD = "view_owner_dashboard"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None
    error: type[AuthorizationError] = AuthorizationError

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def _deny(reason: str, error: type[AuthorizationError] = AuthorizationError) -> Decision:
    return Decision(allowed=False, reason=reason, error=error)


def _require(resource: Any, action: Action) -> Any:
    if resource is None:
        raise ValueError(f"{action.value} needs a target resource")
    return resource


# ── Rules ───────────────────────────────────────────────────────────
def _admin_only(reason: str) -> Callable[[Identity, Any], Decision]:
    def rule(identity: Identity, _resource: Any) -> Decision:
        return ALLOW if identity.role is Role.ADMIN else _deny(reason)

    return rule


def _any_identity(_identity: Identity, _resource: Any) -> Decision:
    return ALLOW


def _update_store(identity: Identity, store: Any) -> Decision:
    store = _require(store, Action.UPDATE_STORE)
    if identity.role is Role.ADMIN or identity.id == store.owner_id:
        return ALLOW
    return _deny("Not authorized to update this store")


def _submit_rating(identity: Identity, store: Any) -> Decision:
    store = _require(store, Action.SUBMIT_RATING)
    if identity.id == store.owner_id:
        return _deny(SelfRatingForbidden.default_message, SelfRatingForbidden)
    return ALLOW


def _delete_rating(identity: Identity, rating: Any) -> Decision:
    rating = _require(rating, Action.DELETE_RATING)
    if identity.role is Role.ADMIN or identity.id == rating.user_id:
        return ALLOW
    return _deny("Not authorized to delete this rating")


def _view_user_ratings(identity: Identity, user_id: Any) -> Decision:
    user_id = _require(user_id, Action.VIEW_USER_RATINGS)
    if identity.role is Role.ADMIN or identity.id == user_id:
        return ALLOW
    return _deny("Not authorized to view these ratings")


def _view_owner_dashboard(identity: Identity, _resource: Any) -> Decision:
    if identity.role in (Role.ADMIN, Role.STORE_OWNER):
        return ALLOW
    return _deny("Access denied. Store owner privileges required.")


_ADMIN_REQUIRED = "Access denied. Admin privileges required."

RULES: dict[Action, Callable[[Identity, Any], Decision]] = {
    Action.MANAGE_USERS: _admin_only(_ADMIN_REQUIRED),
    Action.VIEW_USERS: _admin_only(_ADMIN_REQUIRED),
    Action.MANAGE_STORES: _admin_only(_ADMIN_REQUIRED),
    Action.UPDATE_STORE: _update_store,
    Action.REASSIGN_STORE_OWNER: _admin_only("Only an administrator can change a store's owner"),
    Action.VIEW_STORES: _any_identity,
    Action.SUBMIT_RATING: _submit_rating,
    Action.DELETE_RATING: _delete_rating,
    Action.VIEW_STORE_RATINGS: _any_identity,
    Action.VIEW_USER_RATINGS: _view_user_ratings,
    Action.VIEW_ADMIN_DASHBOARD: _admin_only(_ADMIN_REQUIRED),
    Action.VIEW_OWNER_DASHBOARD: _view_owner_dashboard,
}


def authorize(identity: Identity, action: Action, resource: Any = None) -> Decision:
    """Decide whether *identity* may perform *action* on *resource*.

    ``resource`` is the loaded store for store/rating-submission rules, the
    rating for DELETE_RATING and the target user id for VIEW_USER_RATINGS.
    """
    return RULES[action](identity, resource)


def ensure_allowed(identity: Identity, action: Action, resource: Any = None) -> None:
    """Raise the decision's AuthorizationError when *action* is denied."""
    decision = authorize(identity, action, resource)
    if not decision:
        raise decision.error(decision.reason)
