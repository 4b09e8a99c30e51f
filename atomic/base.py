"""Contracts shared by transacters and backend executors."""

from typing import Any, Callable, Protocol, TypeVar

from atomic.context import Context

Remote = TypeVar("Remote")
Resources = TypeVar("Resources")


class Executor(Protocol[Remote]):
    """Handler for the backend specific transaction logic.

    A call to ``execute`` should:

    - open a new transaction,
    - call ``run`` exactly once with the transaction handle,
    - on error roll back the transaction and re-raise the original error; if
      the rollback fails as well, raise a ``RollbackError`` holding both,
    - on success commit the transaction, raising ``CommitError`` on failure.

    ``ctx`` only governs opening the transaction. Values added to contexts
    inside ``run`` are not propagated back out of ``execute``.

    Implementations may expose a ``remote_type`` attribute naming the type of
    handle they pass to ``run``; transacters use it to validate sessions.
    """

    def execute(self, ctx: Context, run: Callable[[Remote], Any]) -> Any:
        ...


class Transacter(Protocol[Resources]):
    """Runs a unit of work atomically against a bundle of resources."""

    def transact(
        self, ctx: Context, run: Callable[[Context, Resources], Any]
    ) -> Any:
        """Execute ``run`` atomically, rolling back on error and committing on return.

        Atomicity, as far as the backend provides it, only covers statements
        issued through the resources handed to ``run``. If ``ctx`` already
        carries a session the open transaction is reused, so nested calls are
        flattened into the outermost transaction. Statements inside ``run``
        must use the context passed to ``run``, not the one passed here.
        """
        ...
