"""Owner identity for submitted games.

Guests are a distinct type rather than a magic string, so code that must
treat them differently (the puzzle library) checks the type.
"""

from dataclasses import dataclass
from typing import Optional, Union

from chess_review.config import settings


@dataclass(frozen=True)
class AuthenticatedOwner:
    """A signed-in principal identified by its user id."""

    id: str

    @property
    def storage_id(self) -> str:
        return self.id


@dataclass(frozen=True)
class GuestOwner:
    """An unauthenticated principal."""

    @property
    def storage_id(self) -> str:
        return settings.GUEST_OWNER_ID


Owner = Union[AuthenticatedOwner, GuestOwner]


def owner_from_id(owner_id: Optional[str]) -> Owner:
    """Resolve a stored owner id back into an owner.

    Empty ids and the guest sentinel both map to ``GuestOwner``.
    """
    if not owner_id or owner_id == settings.GUEST_OWNER_ID:
        return GuestOwner()
    return AuthenticatedOwner(owner_id)
