"""Executor for SQLAlchemy Core engines."""

from typing import Any, Callable, Optional

from sqlalchemy.engine import Connection, Engine

from atomic.context import Context
from atomic.core.errors import CommitError, OpenError, RollbackError
from atomic.core.logging import get_logger

logger = get_logger(__name__)


class EngineExecutor:
    """Runs work functions on a ``Connection`` inside ``Connection.begin()``.

    Args:
        engine: SQLAlchemy engine to check connections out of
        isolation_level: optional isolation level for the transaction,
            e.g. ``"SERIALIZABLE"``
    """

    remote_type = Connection

    def __init__(self, engine: Engine, isolation_level: Optional[str] = None):
        self.engine = engine
        self.isolation_level = isolation_level

    def _connect(self) -> Connection:
        connection = self.engine.connect()
        if self.isolation_level is not None:
            connection = connection.execution_options(
                isolation_level=self.isolation_level
            )
        return connection

    def execute(self, ctx: Context, run: Callable[[Connection], Any]) -> Any:
        try:
            ctx.raise_if_done()
            connection = self._connect()
        except Exception as e:
            raise OpenError(f"opening sqlalchemy tx: {e}") from e

        try:
            try:
                tx = connection.begin()
            except Exception as e:
                raise OpenError(f"opening sqlalchemy tx: {e}") from e
            logger.debug("Opened sqlalchemy tx")

            try:
                result = run(connection)
            except Exception as e:
                try:
                    tx.rollback()
                except Exception as rollback_error:
                    raise RollbackError(
                        "rolling back sqlalchemy tx", e, rollback_error
                    ) from e
                logger.debug("Rolled back sqlalchemy tx")
                raise

            try:
                tx.commit()
            except Exception as e:
                raise CommitError(f"committing sqlalchemy tx: {e}") from e
            logger.debug("Committed sqlalchemy tx")
            return result
        finally:
            try:
                connection.close()
            except Exception as e:
                # An error already raised above takes precedence
                logger.warning(f"Failed to close sqlalchemy connection: {e}")
