"""Generic transacter usable with any executor.

Nested ``transact`` calls sharing one context chain are flattened into the
transaction opened by the outermost call: only that call opens, retries,
commits and rolls back.
"""

from typing import Any, Callable, Generic, Optional, Sequence, Tuple, Type, TypeVar

from atomic.base import Executor
from atomic.context import Context
from atomic.core.config import check_backoffs, settings
from atomic.core.errors import ResourceCreationError
from atomic.core.logging import get_logger
from atomic.core.observability import log_transaction_event, record_duration
from atomic.retry import RetryFunc, default_retry
from atomic.session import attach_session, session_from_context

logger = get_logger(__name__)

Remote = TypeVar("Remote")
Resources = TypeVar("Resources")

TransacterOption = Callable[[dict], None]


class GenericTransacter(Generic[Remote, Resources]):
    """Transacter working on top of any ``Executor``.

    ``create_resources(ctx, transacter, remote)`` builds the resources handed
    to work functions, e.g. repositories bound to ``remote``. The transacter
    is passed along so the factory can wire services that need to open
    nested transactions themselves.

    Instances hold no per-call state and are safe to share between threads.
    """

    __slots__ = (
        "_executor",
        "_create_resources",
        "_retry",
        "_backoffs",
        "_remote_type",
    )

    def __init__(
        self,
        executor: Executor[Remote],
        create_resources: Callable[
            [Context, "GenericTransacter[Remote, Resources]", Remote], Resources
        ],
        *,
        retry: Optional[RetryFunc] = None,
        backoffs: Optional[Sequence[float]] = None,
        remote_type: Optional[Type[Any]] = None,
    ):
        if backoffs is None:
            backoffs = settings.BACKOFFS
        check_backoffs(backoffs)
        if remote_type is None:
            remote_type = getattr(executor, "remote_type", object)

        object.__setattr__(self, "_executor", executor)
        object.__setattr__(self, "_create_resources", create_resources)
        object.__setattr__(self, "_retry", retry or default_retry)
        object.__setattr__(self, "_backoffs", tuple(backoffs))
        object.__setattr__(self, "_remote_type", remote_type)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def executor(self) -> Executor[Remote]:
        return self._executor

    @property
    def backoffs(self) -> Tuple[float, ...]:
        return self._backoffs

    @property
    def retry(self) -> RetryFunc:
        return self._retry

    @property
    def remote_type(self) -> Type[Any]:
        return self._remote_type

    def transact(
        self, ctx: Context, run: Callable[[Context, Resources], Any]
    ) -> Any:
        """Run ``run`` inside a transaction and return its result.

        If ``ctx`` carries a session the session's transaction is reused: no
        transaction is opened, nothing is retried and errors propagate
        unchanged to the outermost call. Otherwise a new transaction is
        opened through the executor, wrapped in the retry function.

        Raises:
            SessionTypeError: ``ctx`` holds a foreign value under the session
                key. Raised before the executor is called.
            RetryError: the outermost call failed; see ``default_retry``.
        """
        session = session_from_context(ctx, self._remote_type)
        executor_name = type(self._executor).__name__

        if session is not None:
            logger.debug("Reusing transaction from context")
            log_transaction_event("reuse", executor_name)
            return self._in_session(ctx, run)(session.remote)

        def attempt() -> Any:
            logger.debug(f"Opening new transaction with {executor_name}")
            log_transaction_event("open", executor_name)
            return self._executor.execute(ctx, self._in_session(ctx, run))

        with record_duration("transaction_duration_ms", executor_name):
            try:
                return self._retry(self._backoffs, attempt)
            except Exception:
                log_transaction_event("failed", executor_name)
                raise

    def _in_session(
        self, ctx: Context, run: Callable[[Context, Resources], Any]
    ) -> Callable[[Remote], Any]:
        def in_session(remote: Remote) -> Any:
            session_ctx = attach_session(ctx, remote)

            try:
                resources = self._create_resources(session_ctx, self, remote)
            except Exception as e:
                raise ResourceCreationError(f"creating resources: {e}") from e

            return run(session_ctx, resources)

        return in_session


def with_backoff_retry(retry: RetryFunc) -> TransacterOption:
    """Set the retry function which manages automatic retries on errors."""

    def option(kwargs: dict) -> None:
        kwargs["retry"] = retry

    return option


def with_backoff_delays(*backoffs: float) -> TransacterOption:
    """Set the backoffs to use on retry.

    The maximum amount of retries is determined by the number of backoffs.
    """

    def option(kwargs: dict) -> None:
        kwargs["backoffs"] = backoffs

    return option


def new_transacter(
    executor: Executor[Remote],
    create_resources: Callable[
        [Context, GenericTransacter[Remote, Resources], Remote], Resources
    ],
    *options: TransacterOption,
) -> GenericTransacter[Remote, Resources]:
    """Create a transacter configured by option functions.

    By default uses ``default_retry`` and the configured ``BACKOFFS``.
    """
    kwargs: dict = {}
    for option in options:
        option(kwargs)
    return GenericTransacter(executor, create_resources, **kwargs)
