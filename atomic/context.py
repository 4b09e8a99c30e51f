"""Request-scoped context carried through transact calls.

A ``Context`` is immutable: ``with_value``, ``with_cancel`` and
``with_timeout`` return derived children and leave the parent untouched, so
one context can safely branch into many independent call chains.
"""

import threading
import time
from typing import Any, Callable, Optional, Tuple

from atomic.core.errors import ContextCancelledError, DeadlineExceededError


class ContextKey:
    """Key for values stored in a ``Context``; compared by identity."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"ContextKey({self.name!r})"


# Key used to store the active transacter session. Only the transacter writes it.
SESSION_CONTEXT_KEY = ContextKey("session")

_MISSING = object()


class Context:
    """Immutable chain of keyed values plus cancellation and deadline state."""

    __slots__ = ("_parent", "_key", "_value", "_cancel_event", "_deadline")

    def __init__(
        self,
        parent: Optional["Context"] = None,
        key: Any = _MISSING,
        value: Any = None,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ):
        self._parent = parent
        self._key = key
        self._value = value
        self._cancel_event = cancel_event
        self._deadline = deadline

    @classmethod
    def background(cls) -> "Context":
        """Return an empty root context."""
        return cls()

    def with_value(self, key: Any, value: Any) -> "Context":
        if key is None:
            raise ValueError("Context key cannot be None")
        return Context(parent=self, key=key, value=value)

    def value(self, key: Any, default: Any = None) -> Any:
        ctx: Optional[Context] = self
        while ctx is not None:
            if ctx._key is not _MISSING and ctx._key == key:
                return ctx._value
            ctx = ctx._parent
        return default

    def with_cancel(self) -> Tuple["Context", Callable[[], None]]:
        """Return a cancellable child and the function that cancels it."""
        event = threading.Event()
        return Context(parent=self, cancel_event=event), event.set

    def with_timeout(self, seconds: float) -> "Context":
        """Return a child whose deadline is ``seconds`` from now.

        An earlier deadline inherited from the parent still applies.
        """
        return Context(parent=self, deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        """Earliest ``time.monotonic()`` deadline in the chain, if any."""
        earliest = None
        ctx: Optional[Context] = self
        while ctx is not None:
            if ctx._deadline is not None and (
                earliest is None or ctx._deadline < earliest
            ):
                earliest = ctx._deadline
            ctx = ctx._parent
        return earliest

    @property
    def cancelled(self) -> bool:
        ctx: Optional[Context] = self
        while ctx is not None:
            if ctx._cancel_event is not None and ctx._cancel_event.is_set():
                return True
            ctx = ctx._parent
        return False

    def raise_if_done(self) -> None:
        """Raise if the context was cancelled or its deadline passed."""
        if self.cancelled:
            raise ContextCancelledError()
        deadline = self.deadline
        if deadline is not None and time.monotonic() >= deadline:
            raise DeadlineExceededError()

    def __repr__(self) -> str:
        if self._parent is None:
            return "Context.background()"
        return f"Context(key={self._key!r}, parent={self._parent!r})"
