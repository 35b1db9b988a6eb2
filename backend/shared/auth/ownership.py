"""Ownership gate for mutating operations on owned resources."""

from shared.errors import AuthorizationError


def is_owner(actor_id: str, owner_id: str | None) -> bool:
    """Return True iff the acting user owns the resource.

    Anonymous resources (owner_id None) have no owner and match nobody.
    """
    return owner_id is not None and actor_id == owner_id


def ensure_owner(actor_id: str, owner_id: str | None, *, action: str = "modify") -> None:
    """Raise AuthorizationError unless the acting user owns the resource."""
    if not is_owner(actor_id, owner_id):
        raise AuthorizationError(f"You can only {action} your own recipes")
