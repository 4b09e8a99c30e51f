"""Shared fixtures for transacter tests."""

from typing import Any, Callable, List, Optional, Tuple
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from atomic.context import Context
from atomic.core.errors import CommitError, OpenError, RollbackError
from atomic.example.models import Base


class FakeTx:
    """In-memory transaction handle recording pending writes."""

    def __init__(self, store: "InMemoryStore"):
        self.store = store
        self.pending: List[Tuple[str, int]] = []
        self.committed = False
        self.rolled_back = False

    def insert(self, table: str, row_id: int) -> None:
        if (table, row_id) in self.store.rows or (table, row_id) in self.pending:
            raise ValueError(f"duplicate {table} id {row_id}")
        self.pending.append((table, row_id))


class InMemoryStore:
    """Committed rows of the fake backend."""

    def __init__(self):
        self.rows: List[Tuple[str, int]] = []


class RecordingExecutor:
    """Executor over ``InMemoryStore`` counting opens, commits and rollbacks."""

    remote_type = FakeTx

    def __init__(
        self,
        open_errors: Optional[List[Exception]] = None,
        commit_error: Optional[Exception] = None,
        rollback_error: Optional[Exception] = None,
    ):
        self.store = InMemoryStore()
        self.open_errors = list(open_errors or [])
        self.commit_error = commit_error
        self.rollback_error = rollback_error
        self.calls = 0
        self.opened = 0
        self.commits = 0
        self.rollbacks = 0
        self.transactions: List[FakeTx] = []

    def execute(self, ctx: Context, run: Callable[[FakeTx], Any]) -> Any:
        self.calls += 1
        try:
            ctx.raise_if_done()
            if self.open_errors:
                raise self.open_errors.pop(0)
        except Exception as e:
            raise OpenError(f"opening fake tx: {e}") from e

        self.opened += 1
        tx = FakeTx(self.store)
        self.transactions.append(tx)

        try:
            result = run(tx)
        except Exception as e:
            self.rollbacks += 1
            tx.rolled_back = True
            if self.rollback_error is not None:
                raise RollbackError(
                    "rolling back fake tx", e, self.rollback_error
                ) from e
            raise

        if self.commit_error is not None:
            raise CommitError(f"committing fake tx: {self.commit_error}") from (
                self.commit_error
            )
        self.store.rows.extend(tx.pending)
        tx.committed = True
        self.commits += 1
        return result


class Records:
    """Repository writing rows of one table through a ``FakeTx``."""

    def __init__(self, table: str, tx: FakeTx):
        self.table = table
        self.tx = tx

    def create(self, row_id: int) -> int:
        self.tx.insert(self.table, row_id)
        return row_id


class FakeResources:
    def __init__(self, tx: FakeTx, transacter: Any):
        self.tx = tx
        self.transacter = transacter
        self.foos = Records("foo", tx)
        self.bars = Records("bar", tx)


def fake_resources_factory(
    ctx: Context, transacter: Any, tx: FakeTx
) -> FakeResources:
    return FakeResources(tx, transacter)


@pytest.fixture
def ctx():
    """Empty background context."""
    return Context.background()


@pytest.fixture
def executor():
    """Recording in-memory executor."""
    return RecordingExecutor()


@pytest.fixture
def resources_factory():
    return fake_resources_factory


@pytest.fixture
def mock_sleep():
    """Patch the retry policy's sleep so tests never wait."""
    with patch("atomic.retry.time.sleep") as sleep:
        yield sleep


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine shared by all connections, with example tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def sqlite_session_factory(sqlite_engine):
    """Session factory bound to the SQLite engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=sqlite_engine,
        expire_on_commit=False,  # Prevent DetachedInstanceError
    )


@pytest.fixture
def executor_factory():
    """Build recording executors with injected failures."""
    return RecordingExecutor
