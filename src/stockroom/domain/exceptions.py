"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each class carries an ``ErrorKind`` tag; callers that need to map errors to
transport codes switch on ``exc.kind`` rather than on the message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    CONFLICT = "CONFLICT"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    FORBIDDEN = "FORBIDDEN"


class DomainException(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    kind = ErrorKind.VALIDATION


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainException):
    """The operation clashes with the current state of an entity."""

    kind = ErrorKind.CONFLICT


class ForbiddenError(DomainException):
    """The acting principal may not touch this entity."""

    kind = ErrorKind.FORBIDDEN


class InsufficientStockError(DomainException):
    """Requested quantity exceeds the eligible remaining stock."""

    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(requested {requested}, available {available})"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidTransitionError(DomainException):
    """An order status edge that the state table does not allow."""

    kind = ErrorKind.INVALID_TRANSITION

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move order from {current} to {target}")
        self.current = current
        self.target = target


class OrderCreationFailed(DomainException):
    """Checkout could not allocate every line; nothing was kept."""

    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, cause: InsufficientStockError, line_index: int) -> None:
        super().__init__(f"Order creation failed on line {line_index + 1}: {cause}")
        self.cause = cause
        self.line_index = line_index


class StaleVersionError(DomainException):
    """A stored record changed between read and write.

    Raised by repositories; the ledger and the order state machine retry
    on it and surface ``ConflictError`` once the retry ceiling is hit.
    """

    kind = ErrorKind.CONFLICT
