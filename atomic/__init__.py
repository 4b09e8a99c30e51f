"""Backend independent transactions for business layers.

Business code runs against a bundle of resources inside ``transact``; the
executor decides how a transaction is opened, committed and rolled back for
the backend in use.
"""

from .base import Executor, Transacter
from .context import SESSION_CONTEXT_KEY, Context, ContextKey
from .core.errors import (
    AggregateError,
    AttemptError,
    CommitError,
    ContextCancelledError,
    DeadlineExceededError,
    OpenError,
    ResourceCreationError,
    RetryError,
    RollbackError,
    SessionTypeError,
    TransactionError,
)
from .retry import DEFAULT_BACKOFFS, default_retry, is_retryable
from .session import Session
from .transacter import (
    GenericTransacter,
    new_transacter,
    with_backoff_delays,
    with_backoff_retry,
)

__all__ = [
    "AggregateError",
    "AttemptError",
    "CommitError",
    "Context",
    "ContextCancelledError",
    "ContextKey",
    "DEFAULT_BACKOFFS",
    "DeadlineExceededError",
    "Executor",
    "GenericTransacter",
    "OpenError",
    "ResourceCreationError",
    "RetryError",
    "RollbackError",
    "SESSION_CONTEXT_KEY",
    "Session",
    "SessionTypeError",
    "Transacter",
    "TransactionError",
    "default_retry",
    "is_retryable",
    "new_transacter",
    "with_backoff_delays",
    "with_backoff_retry",
]
