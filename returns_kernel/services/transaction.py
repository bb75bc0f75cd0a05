"""
SessionTransaction -- adapts a SQLAlchemy ``Session`` to the ``Transaction``
contract used by the editor.

Failure modes:
    - Any ``SQLAlchemyError`` from a statement or commit rolls the session
      back and is re-raised as ``PersistenceError`` (original chained).
"""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from returns_kernel.domain.ports import Transaction
from returns_kernel.exceptions import PersistenceError
from returns_kernel.logging_config import get_logger

logger = get_logger("services.transaction")


class SessionTransaction(Transaction):
    """``Transaction`` backed by a SQLAlchemy session."""

    def __init__(self, session: Session):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def run(self, statement: Any, parameters: dict[str, Any] | None = None) -> int:
        try:
            if parameters:
                result = self._session.execute(statement, parameters)
            else:
                result = self._session.execute(statement)
        except SQLAlchemyError as exc:
            self._fail("run", exc)
        return result.rowcount

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._fail("commit", exc)
        logger.debug("transaction_committed")

    def rollback(self) -> None:
        self._session.rollback()
        logger.debug("transaction_rolled_back")

    def _fail(self, operation: str, exc: SQLAlchemyError) -> None:
        self._session.rollback()
        logger.warning(
            "transaction_statement_failed",
            extra={"operation": operation, "error_type": type(exc).__name__},
        )
        raise PersistenceError(operation, str(getattr(exc, "orig", None) or exc)) from exc
