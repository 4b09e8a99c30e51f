"""Example repositories bound to the session of the active transaction."""

from typing import List, Optional, cast

from sqlalchemy.orm import Session

from atomic.core.logging import get_logger
from atomic.example.models import Bar, Foo

logger = get_logger(__name__)


class BaseRepo:
    """Base repository class."""

    def __init__(self, session: Session):
        """Initialize the repository with the transaction's session."""
        self.session = session


class FooRepo(BaseRepo):
    """Foo repository."""

    def create(self, foo_id: int, name: str = "") -> Foo:
        """Create a foo; flushed but committed only with the transaction."""
        if foo_id is None:
            raise ValueError("Foo ID cannot be None")

        foo = Foo(id=foo_id, name=name)
        self.session.add(foo)
        self.session.flush()  # Surface constraint errors inside the transaction

        logger.info(f"Created foo: {foo.id}")
        return foo

    def get(self, foo_id: int) -> Optional[Foo]:
        return cast(
            Optional[Foo],
            self.session.query(Foo).filter(Foo.id == foo_id).one_or_none(),
        )

    def list(self) -> List[Foo]:
        return cast(List[Foo], self.session.query(Foo).order_by(Foo.id).all())


class BarRepo(BaseRepo):
    """Bar repository."""

    def create(self, bar_id: int, name: str = "") -> Bar:
        """Create a bar; flushed but committed only with the transaction."""
        if bar_id is None:
            raise ValueError("Bar ID cannot be None")

        bar = Bar(id=bar_id, name=name)
        self.session.add(bar)
        self.session.flush()

        logger.info(f"Created bar: {bar.id}")
        return bar

    def get(self, bar_id: int) -> Optional[Bar]:
        return cast(
            Optional[Bar],
            self.session.query(Bar).filter(Bar.id == bar_id).one_or_none(),
        )

    def list(self) -> List[Bar]:
        return cast(List[Bar], self.session.query(Bar).order_by(Bar.id).all())
