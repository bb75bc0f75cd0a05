"""
TransactionalService -- base for collaborators that write through a shared
transaction.

Responsibility:
    Holds the ``Transaction`` handed over by the editor before each composite
    operation.  Subclasses run statements through it and never commit; the
    editor (or the caller that owns the transaction) decides when to commit.
"""

from returns_kernel.domain.clock import Clock, SystemClock
from returns_kernel.domain.ports import CurrentUser, Transaction, Transactional


class TransactionalService(Transactional):
    """
    Common constructor and transaction handling for writing collaborators.

    Guarantees:
        - Never calls ``transaction.commit()``.
        - Raises RuntimeError when used before a transaction is set.
    """

    def __init__(
        self,
        current_user: CurrentUser,
        clock: Clock | None = None,
        transaction: Transaction | None = None,
    ):
        self._current_user = current_user
        self._clock = clock or SystemClock()
        self._transaction = transaction

    def set_transaction(self, transaction: Transaction) -> None:
        self._transaction = transaction

    @property
    def transaction(self) -> Transaction:
        if self._transaction is None:
            raise RuntimeError(
                f"{type(self).__name__} has no transaction. Call set_transaction() first."
            )
        return self._transaction
