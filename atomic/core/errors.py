"""Exception hierarchy for the transacter and its executors."""

from typing import Iterable, Iterator, Optional, Sequence, Tuple, Type


class TransactionError(Exception):
    """Base class for all errors raised by this package."""


class AggregateError(TransactionError):
    """An error carrying several underlying causes.

    None of the causes is dropped: ``errors`` keeps every one of them in the
    order they happened, and ``str()`` renders all of them.
    """

    def __init__(self, message: str, errors: Iterable[BaseException]):
        self.message = message
        self.errors: Tuple[BaseException, ...] = tuple(errors)
        super().__init__(message)

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        causes = "; ".join(_describe(error) for error in self.errors)
        return f"{self.message}: {causes}"


class AttemptError(TransactionError):
    """The failure of a single attempt made by a retry policy."""

    def __init__(self, attempt: int, error: BaseException):
        self.attempt = attempt
        self.error = error
        super().__init__(f"try {attempt}")
        self.__cause__ = error

    def __str__(self) -> str:
        return f"try {self.attempt}: {_describe(self.error)}"


class RetryError(AggregateError):
    """Raised when an operation failed terminally or ran out of retries."""

    def __init__(self, errors: Sequence[AttemptError]):
        super().__init__(
            "error not retryable or reached maximum number of retries", errors
        )

    @property
    def attempts(self) -> int:
        return len(self.errors)

    @property
    def last_error(self) -> Optional[BaseException]:
        """The exception raised by the final attempt."""
        if not self.errors:
            return None
        last = self.errors[-1]
        return last.error if isinstance(last, AttemptError) else last


class OpenError(TransactionError):
    """Opening a backend transaction failed."""


class CommitError(TransactionError):
    """Committing a backend transaction failed."""


class RollbackError(AggregateError):
    """Rolling back failed after the work function failed.

    ``errors`` holds the original failure first and the rollback failure
    second.
    """

    def __init__(self, message: str, original: BaseException, rollback: BaseException):
        super().__init__(message, (original, rollback))
        self.original = original
        self.rollback = rollback
        self.__cause__ = original


class ResourceCreationError(TransactionError):
    """The resources factory failed to build the resources bundle."""


class SessionTypeError(TransactionError, TypeError):
    """The value stored under the session key is not a usable session."""

    def __init__(self, value: object, expected: str = "Session"):
        self.value = value
        super().__init__(f"cannot use {type(value).__name__} as {expected}")


class ContextCancelledError(TransactionError):
    """The context was cancelled."""

    def __init__(self, message: str = "context canceled"):
        super().__init__(message)


class DeadlineExceededError(TransactionError, TimeoutError):
    """The context deadline passed."""

    def __init__(self, message: str = "context deadline exceeded"):
        super().__init__(message)


def _describe(error: BaseException) -> str:
    text = str(error)
    if not text:
        return type(error).__name__
    return text


def walk(error: Optional[BaseException]) -> Iterator[BaseException]:
    """Yield ``error`` and every exception it wraps, each exactly once.

    Follows ``__cause__``, ``__context__`` and the members of
    ``AggregateError`` instances.
    """
    seen = set()
    stack = [error] if error is not None else []
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        nested = []
        if isinstance(current, AggregateError):
            nested.extend(current.errors)
        if current.__cause__ is not None:
            nested.append(current.__cause__)
        if current.__context__ is not None and not current.__suppress_context__:
            nested.append(current.__context__)
        stack.extend(reversed(nested))


def contains(error: Optional[BaseException], *types: Type[BaseException]) -> bool:
    """Return True if ``error`` is, or wraps, an instance of any of ``types``."""
    return any(isinstance(candidate, types) for candidate in walk(error))
