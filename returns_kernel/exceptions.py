"""
Typed Exception Hierarchy for the Returns Kernel.

Every error raised by the kernel has a typed class, a machine-readable
``code`` class attribute, and structured attributes carrying its context.
Callers catch by type, never by message.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ReturnsKernelError (base)
    |
    +-- ValidationError
    |
    +-- PersistenceError
    |
    +-- PreconditionError
    |   +-- MissingStockLocationError
    |   +-- MissingOrderItemError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |
    +-- ReturnNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | VALIDATION_FAILED           | Business rule or creator input rejected
----------------|-----------------------------|-----------------------------------------
Persistence     | PERSISTENCE_FAILED          | Statement or commit failed (rolled back)
----------------|-----------------------------|-----------------------------------------
Precondition    | PRECONDITION_FAILED         | Operation cannot run on this return
                | MISSING_STOCK_LOCATION      | Restock without a location
                | MISSING_ORDER_ITEM          | Cascade required but no order item
----------------|-----------------------------|-----------------------------------------
Concurrency     | OPTIMISTIC_LOCK_CONFLICT    | Return item modified by another caller
----------------|-----------------------------|-----------------------------------------
Lookup          | RETURN_NOT_FOUND            | Return ID doesn't exist

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        editor.add_payment(order_return, "card", Decimal("100"), "TXN1")
    except OptimisticLockError:
        # Reload the aggregate and retry the operation
        ...
    except ValidationError as e:
        return {"error": e.code, "message": str(e)}

After ANY error the in-memory ``OrderReturn`` may already be mutated;
discard it and reload through ``ReturnSelector``.
"""


class ReturnsKernelError(Exception):
    """
    Base exception for all returns kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "RETURNS_KERNEL_ERROR"


# Validation


class ValidationError(ReturnsKernelError):
    """A business rule rejected the current state of a return or record."""

    code: str = "VALIDATION_FAILED"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


# Persistence


class PersistenceError(ReturnsKernelError):
    """
    A write or commit against the transaction failed.

    The transaction has been rolled back; the in-memory entity has not.
    """

    code: str = "PERSISTENCE_FAILED"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Persistence failed during {operation}: {reason}")


# Preconditions


class PreconditionError(ReturnsKernelError):
    """The return is not in a state where the operation can run."""

    code: str = "PRECONDITION_FAILED"

    def __init__(self, return_id: str, reason: str):
        self.return_id = return_id
        self.reason = reason
        super().__init__(f"Return {return_id}: {reason}")


class MissingStockLocationError(PreconditionError):
    """Item cannot be returned to stock without a location."""

    code: str = "MISSING_STOCK_LOCATION"

    def __init__(self, return_id: str):
        super().__init__(return_id, "no stock location to return the item to")


class MissingOrderItemError(PreconditionError):
    """A status cascade was required but the return has no order item."""

    code: str = "MISSING_ORDER_ITEM"

    def __init__(self, return_id: str):
        super().__init__(return_id, "no order item to cascade the status to")


# Concurrency


class ConcurrencyError(ReturnsKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str, expected_version: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id} "
            f"(expected version {expected_version}): "
            "entity was modified by another transaction"
        )


# Lookup


class ReturnNotFoundError(ReturnsKernelError):
    """Return with given ID was not found."""

    code: str = "RETURN_NOT_FOUND"

    def __init__(self, return_id: str):
        self.return_id = return_id
        super().__init__(f"Return not found: {return_id}")
