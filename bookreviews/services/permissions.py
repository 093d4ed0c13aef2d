"""
Permissions Service

One ownership guard shared by every mutating operation:

    capability = authorize(requester_id, book, "delete")

- Books are owned by the user who added them (owner_id)
- Reviews are owned by their author (user_id)

authorize() either returns a Capability or raises AuthorizationError;
nothing else in the code base compares owner IDs.
"""

import logging
from dataclasses import dataclass

from bookreviews.exceptions import AuthorizationError
from bookreviews.models import Book, Review

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capability:
    """Proof that `requester_id` may perform `action` on `resource`."""

    requester_id: int
    resource: Book | Review
    action: str


def owner_id_of(resource: Book | Review) -> int:
    """Return the ID of the user who owns a resource."""
    if isinstance(resource, Book):
        return resource.owner_id
    if isinstance(resource, Review):
        return resource.user_id
    raise TypeError(f"No ownership rule for {type(resource).__name__}")


def authorize(requester_id: int, resource: Book | Review, action: str) -> Capability:
    """
    Check that the requester owns the resource.

    Args:
        requester_id: ID of the authenticated user
        resource: Book or Review being changed
        action: Verb used in the error message ("update", "delete")

    Returns:
        Capability for the requested action

    Raises:
        AuthorizationError: If the requester is not the owner
    """
    if owner_id_of(resource) != requester_id:
        kind = type(resource).__name__.lower()
        logger.warning(
            f"User {requester_id} denied {action} on {kind} {resource.id}"
        )
        raise AuthorizationError(f"Not authorized to {action} this {kind}")
    return Capability(requester_id=requester_id, resource=resource, action=action)
