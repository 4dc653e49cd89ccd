# Overview: Service-layer operations for issues; request validation, creation, deletion and queries.

"""
Issue Service

WHY: An issue allocates stock to an employee. Stock is reserved the moment the
request is made, before the employee signs, so two requests can never promise
the same units.

CREATE:
- Validate everything first (employee, lines, quantities, stock)
- Then build the pending issue and apply every deduction in one step
- If anything fails, nothing is returned and the caller's collections are untouched

DELETE:
- Removing an issue from history restores the stock it still holds by default.
  pending and issued issues hand their outstanding units back; returned issues
  already did. restore_stock=False removes records without touching stock.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..errors import (
    EmptyIssue,
    InsufficientStock,
    InvalidQuantity,
    StockDesync,
    UnknownEmployee,
    UnknownItem,
)
from ..records import (
    Actor,
    Employee,
    InventoryItem,
    Issue,
    IssuedItem,
    STATUS_PENDING,
    STATUS_RETURNED,
)
from ..time_utils import today as current_date
from ..validation import MAX_ID_LENGTH, ValidationError, coerce_int, coerce_text, require_fields
from .inventory_service import (
    Reconciliation,
    apply_stock_deltas,
    index_inventory,
    outstanding_deltas,
)


@dataclass(frozen=True)
class IssueRequest:
    """What an operator submits: who gets the items, and how many of each."""
    employee_id: str
    items: tuple[tuple[str, Any], ...]

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "IssueRequest":
        """
        Build a request from a submitted payload.

        A missing or empty `items` gives an empty request; create_issue rejects
        it with EmptyIssue once the employee has been checked.

        Raises:
            ValidationError: If the payload, employeeId or a line is malformed
        """
        require_fields(payload, ("employeeId",), "Issue request")
        employee_id = coerce_text("employeeId", payload["employeeId"], max_length=MAX_ID_LENGTH)

        lines = payload.get("items")
        if lines is None:
            lines = []
        if not isinstance(lines, list):
            raise ValidationError("items must be a list of {itemId, quantity} objects")

        items = []
        for index, line in enumerate(lines):
            require_fields(line, ("itemId", "quantity"), f"items[{index}]")
            item_id = coerce_text(f"items[{index}].itemId", line["itemId"], max_length=MAX_ID_LENGTH)
            items.append((item_id, line["quantity"]))
        return cls(employee_id=employee_id, items=tuple(items))


def generate_issue_id(employee_id: str, existing_ids: Iterable[str] = ()) -> str:
    """
    Build an issue id from a millisecond timestamp, a random token and the employee id.

    The random token keeps ids distinct for requests made in the same
    millisecond; the id is regenerated if it still collides with an existing one.
    """
    taken = set(existing_ids)
    while True:
        candidate = f"{int(time.time() * 1000)}-{secrets.token_hex(3)}-{employee_id}"
        if candidate not in taken:
            return candidate


def _find_employee(employees: Iterable[Employee], employee_id: str) -> Employee:
    for employee in employees:
        if employee.id == employee_id:
            return employee
    raise UnknownEmployee(employee_id)


def _merge_lines(request: IssueRequest) -> dict[str, int]:
    """Validate quantities and sum lines that name the same item, keeping first-seen order."""
    merged: dict[str, int] = {}
    for item_id, raw_quantity in request.items:
        try:
            quantity = coerce_int("quantity", raw_quantity)
        except ValidationError:
            raise InvalidQuantity(item_id, raw_quantity)
        if quantity <= 0:
            raise InvalidQuantity(item_id, raw_quantity)
        merged[item_id] = merged.get(item_id, 0) + quantity
    return merged


def create_issue(
    request: IssueRequest,
    inventory: Sequence[InventoryItem],
    employees: Sequence[Employee],
    *,
    actor: Actor,
    issues: Sequence[Issue] = (),
    today: date | None = None,
) -> Reconciliation:
    """
    Create a pending issue and reserve its stock.

    Args:
        request: Employee and requested lines
        inventory: Current inventory (not modified)
        employees: Known employees
        actor: User submitting the request (recorded as createdBy)
        issues: Existing issues; the new one is appended and its id is unique among them
        today: Issue date (defaults to the current date)

    Returns:
        Reconciliation(issue, issues, inventory, warnings)

    Raises:
        UnknownEmployee: Employee id does not resolve
        EmptyIssue: No lines requested
        InvalidQuantity: A quantity is not a positive integer
        UnknownItem: A line names an item that is not in inventory
        InsufficientStock: A line asks for more than is on hand
    """
    employee = _find_employee(employees, request.employee_id)

    if not request.items:
        raise EmptyIssue()

    merged = _merge_lines(request)
    by_id = index_inventory(inventory)

    lines: list[IssuedItem] = []
    for item_id, quantity in merged.items():
        item = by_id.get(item_id)
        if item is None:
            raise UnknownItem(item_id)
        if quantity > item.stock_quantity:
            raise InsufficientStock(item_id, item.name, quantity, item.stock_quantity)
        lines.append(IssuedItem(item_id=item_id, item_name=item.name, quantity=quantity))

    issue = Issue(
        id=generate_issue_id(employee.id, (i.id for i in issues)),
        employee_id=employee.id,
        employee_name=employee.name,
        department=employee.department,
        items=tuple(lines),
        issue_date=today or current_date(),
        status=STATUS_PENDING,
        created_by=actor,
    )

    new_inventory, warnings = apply_stock_deltas(
        inventory, {item_id: -quantity for item_id, quantity in merged.items()}
    )

    return Reconciliation(issue, [*issues, issue], new_inventory, warnings)


def delete_issues(
    issue_ids: Iterable[str],
    issues: Sequence[Issue],
    inventory: Sequence[InventoryItem],
    *,
    restore_stock: bool = True,
) -> Reconciliation:
    """
    Remove issues from history. Unknown ids are ignored.

    With restore_stock (the default) the outstanding units of every deleted
    pending or issued issue go back into stock.
    """
    doomed = set(issue_ids)
    remaining: list[Issue] = []
    deltas: dict[str, int] = {}

    for issue in issues:
        if issue.id not in doomed:
            remaining.append(issue)
            continue
        if restore_stock and issue.status != STATUS_RETURNED:
            for item_id, delta in outstanding_deltas(issue, sign=1).items():
                deltas[item_id] = deltas.get(item_id, 0) + delta

    new_inventory, warnings = apply_stock_deltas(inventory, deltas)
    return Reconciliation(None, remaining, new_inventory, warnings)


def clear_history(
    issues: Sequence[Issue],
    inventory: Sequence[InventoryItem],
    *,
    restore_stock: bool = True,
) -> Reconciliation:
    """Delete every issue."""
    return delete_issues([issue.id for issue in issues], issues, inventory, restore_stock=restore_stock)


def pending_signatures(issues: Iterable[Issue]) -> list[Issue]:
    """Issues waiting for the employee's signature. Always computed from current state."""
    return [issue for issue in issues if issue.status == STATUS_PENDING]


def issues_for_employee(issues: Iterable[Issue], employee_id: str) -> list[Issue]:
    return [issue for issue in issues if issue.employee_id == employee_id]


def summarize_warnings(warnings: Sequence[StockDesync]) -> Optional[str]:
    if not warnings:
        return None
    return "; ".join(str(w) for w in warnings)
