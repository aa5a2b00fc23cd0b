"""
Artwalls - Caller identity for the current request.

The checkout collaborator needs to know who is signed in before it creates a
session on the artist's behalf. The identity lives in context variables for
the duration of a `request_context()` block, so it follows the work into
asyncio tasks started inside the block and is gone once the block exits.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_access_token: ContextVar[str | None] = ContextVar("artwalls_access_token", default=None)
_user_id: ContextVar[str | None] = ContextVar("artwalls_user_id", default=None)


@contextmanager
def request_context(access_token: str | None, user_id: str | None = None) -> Iterator[None]:
    """Bind the caller's access token and user id until the block exits."""
    token_reset = _access_token.set(access_token or None)
    user_reset = _user_id.set(user_id or None)
    try:
        yield
    finally:
        _user_id.reset(user_reset)
        _access_token.reset(token_reset)


def get_access_token() -> str | None:
    return _access_token.get()


def get_current_user_id() -> str | None:
    return _user_id.get()
