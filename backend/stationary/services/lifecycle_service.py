# Overview: Service-layer operations for the issue lifecycle; status transitions and signing.

"""
Issue Lifecycle Service

================================================================================
PURPOSE: Enforce pending -> issued <-> returned for stationary issues
================================================================================

STATE MACHINE:
    pending --(signature)--> issued <--> returned

    pending:  Requested. Stock is already reserved (deducted at creation).
    issued:   Employee signed for the items. No stock change on signing.
    returned: Items are back in stock.

RULES (NON-NEGOTIABLE):
1. pending -> issued happens ONLY through complete_signature().
   transition_issue() refuses it with SignatureRequired.
2. Nothing ever moves back to pending.
3. Same-status transitions are no-ops and never touch stock, so repeating an
   action can not double-credit or double-debit inventory.
4. issued -> returned credits the units still outstanding on each line.
   returned -> issued debits every unit again (clamped at zero).
5. A signature is recorded exactly once. A signed issue can not be re-signed.

All functions are pure: they take the collections they need and return new
ones. Persistence and logging happen in desk_service.
================================================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Mapping, Optional, Sequence

from ..errors import (
    IllegalTransition,
    InvalidQuantity,
    NotPending,
    EmptySignature,
    SignatureRequired,
    UnknownIssue,
    UnknownItem,
)
from ..records import (
    Issue,
    InventoryItem,
    STATUS_ISSUED,
    STATUS_PENDING,
    STATUS_RETURNED,
    VALID_STATUSES,
)
from ..time_utils import today as current_date
from ..validation import ValidationError, coerce_int
from .inventory_service import (
    Reconciliation,
    apply_stock_deltas,
    full_deltas,
    line_deltas,
    outstanding_deltas,
)


# Transitions transition_issue() will perform; same-status moves are handled first
VALID_TRANSITIONS = {
    (STATUS_ISSUED, STATUS_RETURNED),
    (STATUS_RETURNED, STATUS_ISSUED),
}


def validate_status(issue_id: str, current: str, status: str) -> None:
    """
    Validate that a status value is one of the allowed states.

    Raises:
        IllegalTransition: If status is not in VALID_STATUSES
    """
    if status not in VALID_STATUSES:
        raise IllegalTransition(issue_id, current, status)


def can_transition(from_status: str, to_status: str) -> bool:
    """
    Check whether transition_issue() would accept a move.

    Valid:
    - issued -> returned, returned -> issued
    - any status to itself (no-op)

    Invalid:
    - pending -> issued (needs a signature, see complete_signature)
    - anything -> pending
    - pending -> returned
    """
    if from_status not in VALID_STATUSES or to_status not in VALID_STATUSES:
        return False
    if from_status == to_status:
        return True
    return (from_status, to_status) in VALID_TRANSITIONS


def find_issue(issues: Sequence[Issue], issue_id: str) -> Issue:
    for issue in issues:
        if issue.id == issue_id:
            return issue
    raise UnknownIssue(issue_id)


def replace_issue(issues: Sequence[Issue], updated: Issue) -> list[Issue]:
    return [updated if issue.id == updated.id else issue for issue in issues]


def transition_issue(
    issue_id: str,
    target_status: str,
    issues: Sequence[Issue],
    inventory: Sequence[InventoryItem],
) -> Reconciliation:
    """
    Move an issue between issued and returned, reconciling stock.

    Args:
        issue_id: Issue to move
        target_status: "issued" or "returned" ("pending" only as a no-op)
        issues: Current issues (not modified)
        inventory: Current inventory (not modified)

    Returns:
        Reconciliation with the updated issue, issues and inventory

    Raises:
        UnknownIssue: If the issue does not exist
        SignatureRequired: If the issue is pending and target is issued
        IllegalTransition: For any other move the state machine forbids
    """
    issue = find_issue(issues, issue_id)
    validate_status(issue_id, issue.status, target_status)

    if issue.status == target_status:
        return Reconciliation(issue, list(issues), list(inventory), [])

    if issue.status == STATUS_PENDING and target_status == STATUS_ISSUED:
        raise SignatureRequired(issue_id)

    if not can_transition(issue.status, target_status):
        raise IllegalTransition(issue_id, issue.status, target_status)

    if target_status == STATUS_RETURNED:
        # Only what is still outstanding goes back; partial returns already did the rest
        deltas = outstanding_deltas(issue, sign=1)
        lines = tuple(replace(line, returned=line.quantity) for line in issue.items)
    else:
        deltas = full_deltas(issue, sign=-1)
        lines = tuple(replace(line, returned=0) for line in issue.items)

    new_inventory, warnings = apply_stock_deltas(inventory, deltas)
    updated = replace(issue, status=target_status, items=lines)

    return Reconciliation(updated, replace_issue(issues, updated), new_inventory, warnings)


def complete_signature(
    issue_id: str,
    signature: Optional[str],
    issues: Sequence[Issue],
    *,
    today: date | None = None,
) -> list[Issue]:
    """
    Record the employee's signature (pending -> issued).

    No inventory effect: stock was reserved when the issue was created, signing
    only authorizes it.

    Raises:
        UnknownIssue: If the issue does not exist
        NotPending: If the issue has already been signed
        EmptySignature: If the signature is missing or blank
    """
    issue = find_issue(issues, issue_id)

    if issue.status != STATUS_PENDING:
        raise NotPending(issue_id, issue.status)

    if signature is None or not str(signature).strip():
        raise EmptySignature(issue_id)

    updated = replace(
        issue,
        status=STATUS_ISSUED,
        signature_data=str(signature),
        signed_date=today or current_date(),
    )
    return replace_issue(issues, updated)


def return_items(
    issue_id: str,
    quantities: Mapping[str, int],
    issues: Sequence[Issue],
    inventory: Sequence[InventoryItem],
) -> Reconciliation:
    """
    Return part of an issued issue to stock.

    Each line's `returned` count goes up by the given quantity and the stock is
    credited by the same amount. When every line is fully returned the issue
    moves to returned.

    Args:
        issue_id: An issue in issued status
        quantities: item_id -> units coming back

    Raises:
        UnknownIssue: If the issue does not exist
        IllegalTransition: If the issue is not issued
        UnknownItem: If an item is not a line of this issue
        InvalidQuantity: If a quantity is not positive or exceeds what is outstanding
    """
    issue = find_issue(issues, issue_id)

    if issue.status != STATUS_ISSUED:
        raise IllegalTransition(issue_id, issue.status, STATUS_RETURNED)

    if not quantities:
        raise InvalidQuantity(issue_id, 0, "no items given to return")

    # Validate every line before touching anything
    parsed: dict[str, int] = {}
    for item_id, raw in quantities.items():
        line = issue.line_for(item_id)
        if line is None:
            raise UnknownItem(item_id, issue_id=issue_id)
        try:
            qty = coerce_int("quantity", raw)
        except ValidationError:
            raise InvalidQuantity(item_id, raw)
        if qty <= 0:
            raise InvalidQuantity(item_id, raw)
        if qty > line.outstanding:
            raise InvalidQuantity(item_id, qty, f"exceeds the {line.outstanding} still outstanding")
        parsed[item_id] = qty

    lines = tuple(
        replace(line, returned=line.returned + parsed.get(line.item_id, 0))
        for line in issue.items
    )
    status = STATUS_RETURNED if all(line.fully_returned for line in lines) else STATUS_ISSUED

    new_inventory, warnings = apply_stock_deltas(inventory, line_deltas(issue, parsed, sign=1))
    updated = replace(issue, items=lines, status=status)

    return Reconciliation(updated, replace_issue(issues, updated), new_inventory, warnings)
