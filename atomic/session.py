"""Session: the in-flight transaction marker carried in a Context."""

from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar

from atomic.context import SESSION_CONTEXT_KEY, Context
from atomic.core.errors import SessionTypeError

Remote = TypeVar("Remote")


@dataclass(frozen=True)
class Session(Generic[Remote]):
    """Holds the live transaction handle of the outermost transact call."""

    remote: Remote


def attach_session(ctx: Context, remote: Remote) -> Context:
    """Return a child of ``ctx`` carrying a new session for ``remote``."""
    return ctx.with_value(SESSION_CONTEXT_KEY, Session(remote))


def session_from_context(
    ctx: Context, remote_type: Type[object] = object
) -> Optional[Session]:
    """Return the session stored in ``ctx``, or None when there is none.

    Raises:
        SessionTypeError: the stored value is not a ``Session`` or its remote
            is not an instance of ``remote_type``.
    """
    value = ctx.value(SESSION_CONTEXT_KEY)
    if value is None:
        return None
    if not isinstance(value, Session):
        raise SessionTypeError(value)
    if not isinstance(value.remote, remote_type):
        raise SessionTypeError(
            value.remote, expected=f"Session[{remote_type.__name__}] remote"
        )
    return value
