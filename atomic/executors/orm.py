"""Executor for SQLAlchemy ORM sessions."""

from typing import Any, Callable

from sqlalchemy.orm import Session

from atomic.context import Context
from atomic.core.errors import CommitError, OpenError, RollbackError
from atomic.core.logging import get_logger

logger = get_logger(__name__)


class SessionExecutor:
    """Runs work functions inside a session from a SQLAlchemy session factory.

    Usage:
        executor = SessionExecutor(SessionLocal)
        transacter = GenericTransacter(executor, resources_factory)

    Args:
        session_factory: SQLAlchemy session factory (e.g., SessionLocal)
    """

    remote_type = Session

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def execute(self, ctx: Context, run: Callable[[Session], Any]) -> Any:
        """Run ``run`` with a fresh session, committing on success.

        Raises:
            OpenError: the context was done or the session could not be created.
            RollbackError: ``run`` failed and the rollback failed too.
            CommitError: the commit failed.
            Exception: Any exception from ``run`` (after rollback)
        """
        try:
            ctx.raise_if_done()
            session = self.session_factory()
        except Exception as e:
            raise OpenError(f"opening orm session: {e}") from e

        logger.debug("Opened orm session")
        try:
            try:
                result = run(session)
            except Exception as e:
                try:
                    session.rollback()
                except Exception as rollback_error:
                    raise RollbackError(
                        "rolling back orm session", e, rollback_error
                    ) from e
                logger.debug("Rolled back orm session")
                raise

            try:
                session.commit()
            except Exception as e:
                raise CommitError(f"committing orm session: {e}") from e
            logger.debug("Committed orm session")
            return result
        finally:
            try:
                session.close()
            except Exception as e:
                # Session cleanup is best effort
                logger.warning(f"Failed to close orm session: {e}")
