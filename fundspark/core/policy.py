"""FundSpark — Authorization Policy.

One predicate decides whether an actor may perform an action on a campaign,
so campaign, payment and engagement code share the same ownership rules.
"""

from enum import Enum
from typing import Optional, Protocol

from fundspark.core.errors import Forbidden
from fundspark.models.user_models import UserRole


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    REVIEW = "review"
    VIEW_ANALYTICS = "view_analytics"


class Actor(Protocol):
    id: int
    role: str


class OwnedResource(Protocol):
    creator_id: int


CREATE_ROLES = {UserRole.CREATOR.value, UserRole.ADMIN.value}


def is_admin(actor: Actor) -> bool:
    return actor.role == UserRole.ADMIN.value


def is_owner(actor: Actor, resource: OwnedResource) -> bool:
    return resource.creator_id == actor.id


def is_allowed(
    actor: Optional[Actor], resource: Optional[OwnedResource], action: Action
) -> bool:
    """Return True when ``actor`` may perform ``action`` on ``resource``.

    Ownership is the only thing checked for update/delete; status-based rules
    are business conflicts, not permission failures.
    """
    if actor is None:
        return False
    if action == Action.CREATE:
        return actor.role in CREATE_ROLES
    if action in (Action.REVIEW, Action.VIEW_ANALYTICS):
        return is_admin(actor)
    if action in (Action.UPDATE, Action.DELETE):
        return resource is not None and (is_owner(actor, resource) or is_admin(actor))
    return False


def ensure_allowed(
    actor: Optional[Actor],
    resource: Optional[OwnedResource],
    action: Action,
    message: str | None = None,
) -> None:
    if not is_allowed(actor, resource, action):
        raise Forbidden(message or f"Not authorized to {action.value} this campaign")
