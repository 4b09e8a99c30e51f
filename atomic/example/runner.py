"""Example flow: set up a transacter and run a unit of work with it."""

from typing import Any, Dict, List

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from atomic.context import Context
from atomic.core.config import settings
from atomic.core.logging import get_logger
from atomic.example.models import Base
from atomic.example.resources import Resources, resources_factory
from atomic.executors.orm import SessionExecutor
from atomic.transacter import GenericTransacter

logger = get_logger(__name__)


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def build_transacter(engine: Engine) -> GenericTransacter[Session, Resources]:
    """Wire an ORM executor and the example resources into a transacter."""
    session_factory = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )
    return GenericTransacter(SessionExecutor(session_factory), resources_factory)


def run_example(database_url: str = "sqlite://") -> List[int]:
    """Create two pairs atomically and return the ids of all stored foos."""
    engine_kwargs: Dict[str, Any] = {"echo": settings.SQL_ECHO}
    if database_url == "sqlite://":
        # One shared in-memory database for every connection
        engine_kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, **engine_kwargs)
    try:
        create_schema(engine)
        transacter = build_transacter(engine)

        def create_pairs(ctx: Context, resources: Resources) -> None:
            resources.pairs.create_pair(ctx, 1, "first")
            # eg here we can do some more business logic, like payments;
            # both pairs only get committed if everything succeeds
            resources.pairs.create_pair(ctx, 2, "second")

        transacter.transact(Context.background(), create_pairs)

        ids = transacter.transact(
            Context.background(),
            lambda ctx, resources: [foo.id for foo in resources.foos.list()],
        )
        logger.info(f"Stored foos: {ids}")
        return ids
    finally:
        engine.dispose()
