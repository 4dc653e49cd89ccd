# Overview: Domain error taxonomy for the issue lifecycle and stock reconciliation.

"""
Issue Engine Errors

Every rejected operation raises one of the StationaryError subclasses below.
They are domain errors, not technical errors: the caller shows the message to
the operator, who corrects the input and retries. Nothing is ever partially
applied when one of these is raised.

StockDesync is the exception to the rule: it is not raised. Operations that
had to clamp a stock level at zero still succeed and hand StockDesync records
back alongside their result so the caller can log or display them.
"""

from __future__ import annotations

from dataclasses import dataclass


class StationaryError(ValueError):
    """Base class for rejected stationary operations."""
    pass


class UnknownEmployee(StationaryError):
    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id!r} not found")


class UnknownItem(StationaryError):
    def __init__(self, item_id: str, *, issue_id: str | None = None):
        self.item_id = item_id
        self.issue_id = issue_id
        if issue_id is None:
            message = f"Inventory item {item_id!r} not found"
        else:
            message = f"Item {item_id!r} is not a line of issue {issue_id!r}"
        super().__init__(message)


class UnknownIssue(StationaryError):
    def __init__(self, issue_id: str):
        self.issue_id = issue_id
        super().__init__(f"Issue {issue_id!r} not found")


class EmptyIssue(StationaryError):
    def __init__(self):
        super().__init__("An issue must contain at least one item")


class InvalidQuantity(StationaryError):
    def __init__(self, item_id: str, quantity, reason: str = "must be a positive integer"):
        self.item_id = item_id
        self.quantity = quantity
        super().__init__(f"Quantity {quantity!r} for item {item_id!r} {reason}")


class InsufficientStock(StationaryError):
    def __init__(self, item_id: str, item_name: str, requested: int, available: int):
        self.item_id = item_id
        self.item_name = item_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough stock for {item_name} ({item_id}). "
            f"Requested: {requested}, available: {available}"
        )


class IllegalTransition(StationaryError):
    def __init__(self, issue_id: str, from_status: str, to_status: str):
        self.issue_id = issue_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot move issue {issue_id!r} from '{from_status}' to '{to_status}'"
        )


class SignatureRequired(StationaryError):
    def __init__(self, issue_id: str):
        self.issue_id = issue_id
        super().__init__(
            f"Issue {issue_id!r} is pending; it becomes 'issued' only once the employee signs"
        )


class NotPending(StationaryError):
    def __init__(self, issue_id: str, status: str):
        self.issue_id = issue_id
        self.status = status
        super().__init__(
            f"Cannot sign issue {issue_id!r}: current status is '{status}', must be 'pending'"
        )


class EmptySignature(StationaryError):
    def __init__(self, issue_id: str):
        self.issue_id = issue_id
        super().__init__(f"Signature for issue {issue_id!r} is empty")


class InvalidRecord(StationaryError):
    """A stored or imported record violates a data model invariant."""

    def __init__(self, record_type: str, record_id, message: str):
        self.record_type = record_type
        self.record_id = record_id
        label = f"{record_type} {record_id!r}" if record_id is not None else record_type
        super().__init__(f"Invalid {label}: {message}")


@dataclass(frozen=True)
class StockDesync:
    """
    A stock level would have gone below zero and was clamped to 0.

    Indicates out-of-band data (a manual edit or a corrupted import) broke the
    rule that issued quantities never exceed the stock that was available.
    """
    item_id: str
    item_name: str
    requested: int
    available: int

    @property
    def shortfall(self) -> int:
        return self.requested - self.available

    def __str__(self) -> str:
        return (
            f"Stock desync on {self.item_name} ({self.item_id}): "
            f"needed {self.requested}, had {self.available}; clamped to 0"
        )
