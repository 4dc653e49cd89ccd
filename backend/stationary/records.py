# Overview: Immutable records for inventory items, issues, employees and actors.

"""
Stationary Records

Every record the engine reads or returns is a frozen dataclass. Operations
never mutate a record in place; they build a new one with dataclasses.replace
and return new collections, so a caller still holding the old collections
still sees the old state.

SERIALIZATION:
- to_dict() produces the camelCase shape used by the storage slots and the
  export file (stockQuantity, employeeName, signatureData, ...).
- from_dict() is the boundary check for stored or imported data. It raises
  InvalidRecord for any invariant violation (negative stock, an issue with no
  lines, a signed status without a signature) instead of accepting it.

SNAPSHOTS:
Issue.employee_name, Issue.department and IssuedItem.item_name are copied at
creation time and never re-resolved. Renaming or deleting the employee or item
later leaves historical issues exactly as they were recorded.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Optional

from .errors import InvalidRecord
from .time_utils import parse_iso_date
from .validation import ValidationError, coerce_int, coerce_text, require_fields


STATUS_PENDING = "pending"
STATUS_ISSUED = "issued"
STATUS_RETURNED = "returned"

VALID_STATUSES = (STATUS_PENDING, STATUS_ISSUED, STATUS_RETURNED)
SIGNED_STATUSES = {STATUS_ISSUED, STATUS_RETURNED}

DEFAULT_UNIT = "pcs"


def _field(payload: dict, key: str, record_type: str, record_id, coerce):
    try:
        return coerce(key, payload.get(key))
    except ValidationError as e:
        raise InvalidRecord(record_type, record_id, str(e)) from e


@dataclass(frozen=True)
class Actor:
    """The acting user, passed explicitly into every operation that records who did it."""
    role: str
    name: str
    employee_id: str

    def to_dict(self) -> dict:
        return {"role": self.role, "name": self.name, "employeeId": self.employee_id}

    @classmethod
    def from_dict(cls, payload: Any) -> "Actor":
        try:
            require_fields(payload, ("role", "name", "employeeId"), "createdBy")
        except ValidationError as e:
            raise InvalidRecord("Actor", None, str(e)) from e
        return cls(
            role=str(payload["role"]),
            name=str(payload["name"]),
            employee_id=str(payload["employeeId"]),
        )


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    department: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "department": self.department}

    @classmethod
    def from_dict(cls, payload: Any) -> "Employee":
        try:
            require_fields(payload, ("id", "name", "department"), "Employee")
            return cls(
                id=coerce_text("id", payload["id"]),
                name=coerce_text("name", payload["name"]),
                department=coerce_text("department", payload["department"]),
            )
        except ValidationError as e:
            record_id = payload.get("id") if isinstance(payload, dict) else None
            raise InvalidRecord("Employee", record_id, str(e)) from e


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str
    category: str
    stock_quantity: int
    unit: str = DEFAULT_UNIT
    threshold: int = 0

    def __post_init__(self):
        if self.stock_quantity < 0:
            raise InvalidRecord("InventoryItem", self.id, "stockQuantity cannot be negative")
        if self.threshold < 0:
            raise InvalidRecord("InventoryItem", self.id, "threshold cannot be negative")

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.threshold

    def with_stock(self, stock_quantity: int) -> "InventoryItem":
        return replace(self, stock_quantity=stock_quantity)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "stockQuantity": self.stock_quantity,
            "unit": self.unit,
            "threshold": self.threshold,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "InventoryItem":
        record_id = payload.get("id") if isinstance(payload, dict) else None
        try:
            require_fields(payload, ("id", "name", "category", "stockQuantity", "unit", "threshold"), "InventoryItem")
        except ValidationError as e:
            raise InvalidRecord("InventoryItem", record_id, str(e)) from e

        return cls(
            id=_field(payload, "id", "InventoryItem", record_id, coerce_text),
            name=_field(payload, "name", "InventoryItem", record_id, coerce_text),
            category=_field(payload, "category", "InventoryItem", record_id, coerce_text),
            stock_quantity=_field(payload, "stockQuantity", "InventoryItem", record_id, coerce_int),
            unit=_field(payload, "unit", "InventoryItem", record_id, coerce_text),
            threshold=_field(payload, "threshold", "InventoryItem", record_id, coerce_int),
        )


@dataclass(frozen=True)
class IssuedItem:
    """One line of an issue. `returned` counts units already back in stock."""
    item_id: str
    item_name: str
    quantity: int
    returned: int = 0

    def __post_init__(self):
        if self.quantity <= 0:
            raise InvalidRecord("IssuedItem", self.item_id, "quantity must be positive")
        if not 0 <= self.returned <= self.quantity:
            raise InvalidRecord(
                "IssuedItem", self.item_id,
                f"returned must be between 0 and {self.quantity}, got {self.returned}",
            )

    @property
    def outstanding(self) -> int:
        """Units still held by the employee."""
        return self.quantity - self.returned

    @property
    def fully_returned(self) -> bool:
        return self.returned == self.quantity

    def to_dict(self) -> dict:
        return {
            "itemId": self.item_id,
            "itemName": self.item_name,
            "quantity": self.quantity,
            "returned": self.returned,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "IssuedItem":
        record_id = payload.get("itemId") if isinstance(payload, dict) else None
        try:
            require_fields(payload, ("itemId", "itemName", "quantity"), "IssuedItem")
            returned = payload.get("returned")
            return cls(
                item_id=coerce_text("itemId", payload["itemId"]),
                item_name=coerce_text("itemName", payload["itemName"]),
                quantity=coerce_int("quantity", payload["quantity"]),
                returned=0 if returned is None else coerce_int("returned", returned),
            )
        except ValidationError as e:
            raise InvalidRecord("IssuedItem", record_id, str(e)) from e


@dataclass(frozen=True)
class Issue:
    id: str
    employee_id: str
    employee_name: str
    department: str
    items: tuple[IssuedItem, ...]
    issue_date: date
    status: str = STATUS_PENDING
    signature_data: Optional[str] = None
    signed_date: Optional[date] = None
    created_by: Optional[Actor] = None

    def __post_init__(self):
        # Accept any sequence of lines but always store a tuple
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
        if not self.items:
            raise InvalidRecord("Issue", self.id, "an issue must contain at least one item")
        item_ids = [line.item_id for line in self.items]
        if len(set(item_ids)) != len(item_ids):
            raise InvalidRecord("Issue", self.id, "each item may appear on only one line")
        if self.status not in VALID_STATUSES:
            raise InvalidRecord(
                "Issue", self.id,
                f"status '{self.status}' must be one of: {', '.join(VALID_STATUSES)}",
            )
        if self.status in SIGNED_STATUSES and not self.signature_data:
            raise InvalidRecord("Issue", self.id, f"status '{self.status}' requires a signature")

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def total_returned(self) -> int:
        return sum(line.returned for line in self.items)

    def line_for(self, item_id: str) -> Optional[IssuedItem]:
        for line in self.items:
            if line.item_id == item_id:
                return line
        return None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "department": self.department,
            "items": [line.to_dict() for line in self.items],
            "issueDate": self.issue_date.isoformat(),
            "status": self.status,
        }
        if self.signature_data is not None:
            data["signatureData"] = self.signature_data
        if self.signed_date is not None:
            data["signedDate"] = self.signed_date.isoformat()
        if self.created_by is not None:
            data["createdBy"] = self.created_by.to_dict()
        return data

    @classmethod
    def from_dict(cls, payload: Any) -> "Issue":
        record_id = payload.get("id") if isinstance(payload, dict) else None
        try:
            require_fields(
                payload,
                ("id", "employeeId", "employeeName", "department", "items", "issueDate", "status"),
                "Issue",
            )
            if not isinstance(payload["items"], list):
                raise ValidationError("items must be a list")
            issue_date = parse_iso_date(payload["issueDate"])
            if issue_date is None:
                raise ValidationError("issueDate is required")
            signed_date = parse_iso_date(payload.get("signedDate"))
        except ValidationError as e:
            raise InvalidRecord("Issue", record_id, str(e)) from e
        except (TypeError, ValueError) as e:
            raise InvalidRecord("Issue", record_id, f"invalid date: {e}") from e

        lines = payload["items"]
        if payload["status"] == STATUS_RETURNED:
            # Older exports mark the whole issue returned without per-line counts
            lines = [
                {**line, "returned": line.get("quantity")}
                if isinstance(line, dict) and "returned" not in line else line
                for line in lines
            ]

        created_by = payload.get("createdBy")
        return cls(
            id=str(payload["id"]),
            employee_id=str(payload["employeeId"]),
            employee_name=str(payload["employeeName"]),
            department=str(payload["department"]),
            items=tuple(IssuedItem.from_dict(line) for line in lines),
            issue_date=issue_date,
            status=payload["status"],
            signature_data=payload.get("signatureData") or None,
            signed_date=signed_date,
            created_by=Actor.from_dict(created_by) if created_by else None,
        )


@dataclass(frozen=True)
class DataSet:
    """The four collections that are loaded, transformed and saved as one unit."""
    inventory: tuple[InventoryItem, ...] = ()
    issues: tuple[Issue, ...] = ()
    employees: tuple[Employee, ...] = ()
    categories: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "inventory": [item.to_dict() for item in self.inventory],
            "issues": [issue.to_dict() for issue in self.issues],
            "employees": [employee.to_dict() for employee in self.employees],
            "categories": list(self.categories),
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "DataSet":
        return cls(
            inventory=tuple(InventoryItem.from_dict(row) for row in payload.get("inventory") or []),
            issues=tuple(Issue.from_dict(row) for row in payload.get("issues") or []),
            employees=tuple(Employee.from_dict(row) for row in payload.get("employees") or []),
            categories=tuple(str(c) for c in payload.get("categories") or []),
        )
