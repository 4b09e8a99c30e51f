"""Executor for plain PEP 249 (DB-API 2.0) database drivers."""

from typing import Any, Callable, Optional

from atomic.context import Context
from atomic.core.errors import CommitError, OpenError, RollbackError
from atomic.core.logging import get_logger

logger = get_logger(__name__)


class DBAPIExecutor:
    """Runs work functions on a fresh DB-API connection.

    DB-API connections start a transaction implicitly, so ``begin_statement``
    is only needed to pick options such as the isolation level, e.g.
    ``"BEGIN ISOLATION LEVEL SERIALIZABLE"`` for psycopg or
    ``"BEGIN IMMEDIATE"`` for sqlite3.

    Args:
        connect: zero-argument callable returning a new connection
        begin_statement: optional statement issued before ``run``
    """

    remote_type = object

    def __init__(
        self, connect: Callable[[], Any], begin_statement: Optional[str] = None
    ):
        self.connect = connect
        self.begin_statement = begin_statement

    def _begin(self, connection: Any) -> None:
        if self.begin_statement is None:
            return
        cursor = connection.cursor()
        try:
            cursor.execute(self.begin_statement)
        finally:
            cursor.close()

    def execute(self, ctx: Context, run: Callable[[Any], Any]) -> Any:
        try:
            ctx.raise_if_done()
            connection = self.connect()
        except Exception as e:
            raise OpenError(f"opening sql tx: {e}") from e

        try:
            try:
                self._begin(connection)
            except Exception as e:
                raise OpenError(f"opening sql tx: {e}") from e
            logger.debug("Opened sql tx")

            try:
                result = run(connection)
            except Exception as e:
                try:
                    connection.rollback()
                except Exception as rollback_error:
                    raise RollbackError(
                        "rolling back sql tx", e, rollback_error
                    ) from e
                logger.debug("Rolled back sql tx")
                raise

            try:
                connection.commit()
            except Exception as e:
                raise CommitError(f"committing sql tx: {e}") from e
            logger.debug("Committed sql tx")
            return result
        finally:
            try:
                connection.close()
            except Exception as e:
                # An error already raised above takes precedence
                logger.warning(f"Failed to close sql connection: {e}")
