"""Resources bundle managed by the transacter in the example."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

from sqlalchemy.orm import Session

from atomic.context import Context
from atomic.core.logging import get_logger
from atomic.example.models import Bar, Foo
from atomic.example.repositories import BarRepo, FooRepo

if TYPE_CHECKING:
    from atomic.transacter import GenericTransacter

logger = get_logger(__name__)


class PairService:
    """Business service creating a foo and a bar together.

    It opens its own transactions, so it can be called on its own or from
    within another transaction, in which case it joins that one.
    """

    def __init__(self, transacter: "GenericTransacter[Session, Resources]"):
        self.transacter = transacter

    def create_pair(
        self, ctx: Context, pair_id: int, name: str = ""
    ) -> Tuple[Foo, Bar]:
        logger.info(f"Creating pair {pair_id}")

        def create(ctx: Context, resources: "Resources") -> Tuple[Foo, Bar]:
            foo = resources.foos.create(pair_id, name)
            bar = resources.bars.create(pair_id, name)
            return foo, bar

        return self.transacter.transact(ctx, create)


@dataclass(frozen=True)
class Resources:
    """Registry of the repositories and services handed to work functions."""

    foos: FooRepo
    bars: BarRepo
    pairs: PairService


def resources_factory(
    ctx: Context,
    transacter: "GenericTransacter[Session, Resources]",
    session: Session,
) -> Resources:
    # Services that need a transacter themselves get the calling one, so
    # their transactions join the active one through the context.
    return Resources(
        foos=FooRepo(session),
        bars=BarRepo(session),
        pairs=PairService(transacter),
    )
