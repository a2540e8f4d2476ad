"""Caller identity, passed explicitly through every handler.

Three shapes exist:

* ``Authenticated``: a signed-in customer (``is_admin`` for staff).
* ``Guest``: an anonymous caller carrying the session id handed out by the
  session layer.  The core never invents that id.
* ``Public``: an anonymous caller with no session id at all.

Nothing here reads cookies or request context, so the access rules can be
exercised in tests with plain objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ordercore.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Authenticated:
    user_id: str
    is_admin: bool = False

    def __post_init__(self) -> None:
        if not self.user_id or not str(self.user_id).strip():
            raise ValidationError("Authenticated identity needs a user id")


@dataclass(frozen=True)
class Guest:
    session_id: str

    def __post_init__(self) -> None:
        if not self.session_id or not str(self.session_id).strip():
            raise ValidationError("Guest identity needs a session id; use Public instead")


@dataclass(frozen=True)
class Public:
    pass


Identity = Union[Authenticated, Guest, Public]

PUBLIC = Public()


def is_admin(identity: Identity) -> bool:
    return isinstance(identity, Authenticated) and identity.is_admin


def from_session(user_id: str | None, guest_session_id: str | None = None,
                 admin: bool = False) -> Identity:
    """Build an identity from what the auth and session layers hand over.

    A signed-in user always wins over a stale guest session id.
    """
    if user_id and user_id.strip():
        return Authenticated(user_id=user_id.strip(), is_admin=admin)
    if guest_session_id and guest_session_id.strip():
        return Guest(session_id=guest_session_id.strip())
    return PUBLIC
