"""Executor for CockroachDB using its client-side transaction retry protocol."""

from typing import Any, Callable, Optional

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError

from atomic.context import Context
from atomic.core.errors import CommitError, OpenError, RollbackError, walk
from atomic.core.logging import get_logger

logger = get_logger(__name__)

RESTART_SAVEPOINT = "cockroach_restart"
SERIALIZATION_FAILURE = "40001"


def is_serialization_failure(error: BaseException) -> bool:
    """Return True if ``error`` wraps a SQLSTATE 40001 driver error."""
    for candidate in walk(error):
        if not isinstance(candidate, DBAPIError):
            continue
        orig = candidate.orig
        # psycopg exposes ``sqlstate``, psycopg2 ``pgcode``
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if code == SERIALIZATION_FAILURE:
            return True
    return False


class CockroachExecutor:
    """Runs work functions in a CockroachDB transaction with restart savepoint.

    On a serialization failure the transaction is rewound to the
    ``cockroach_restart`` savepoint and ``run`` is called again inside the
    same transaction, so ``run`` may be called more than once.

    Args:
        engine: SQLAlchemy engine using a CockroachDB dialect
        isolation_level: optional isolation level for the transaction
        max_restarts: maximum number of restarts, unlimited if None
    """

    remote_type = Connection

    def __init__(
        self,
        engine: Engine,
        isolation_level: Optional[str] = None,
        max_restarts: Optional[int] = None,
    ):
        self.engine = engine
        self.isolation_level = isolation_level
        self.max_restarts = max_restarts

    def _connect(self) -> Connection:
        connection = self.engine.connect()
        if self.isolation_level is not None:
            connection = connection.execution_options(
                isolation_level=self.isolation_level
            )
        return connection

    def _run_with_restarts(
        self, connection: Connection, run: Callable[[Connection], Any]
    ) -> Any:
        restarts = 0
        while True:
            try:
                result = run(connection)
                connection.exec_driver_sql(f"RELEASE SAVEPOINT {RESTART_SAVEPOINT}")
                return result
            except Exception as e:
                if not is_serialization_failure(e):
                    raise
                if self.max_restarts is not None and restarts >= self.max_restarts:
                    raise
                restarts += 1
                logger.debug(
                    f"Restarting crdb tx after serialization failure ({restarts})"
                )
                connection.exec_driver_sql(
                    f"ROLLBACK TO SAVEPOINT {RESTART_SAVEPOINT}"
                )

    def execute(self, ctx: Context, run: Callable[[Connection], Any]) -> Any:
        try:
            ctx.raise_if_done()
            connection = self._connect()
        except Exception as e:
            raise OpenError(f"opening crdb tx: {e}") from e

        try:
            try:
                tx = connection.begin()
                connection.exec_driver_sql(f"SAVEPOINT {RESTART_SAVEPOINT}")
            except Exception as e:
                raise OpenError(f"opening crdb tx: {e}") from e
            logger.debug("Opened crdb tx")

            try:
                result = self._run_with_restarts(connection, run)
            except Exception as e:
                try:
                    tx.rollback()
                except Exception as rollback_error:
                    raise RollbackError(
                        "rolling back crdb tx", e, rollback_error
                    ) from e
                logger.debug("Rolled back crdb tx")
                raise

            try:
                tx.commit()
            except Exception as e:
                raise CommitError(f"committing crdb tx: {e}") from e
            logger.debug("Committed crdb tx")
            return result
        finally:
            try:
                connection.close()
            except Exception as e:
                # An error already raised above takes precedence
                logger.warning(f"Failed to close crdb connection: {e}")
