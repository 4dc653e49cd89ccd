# Overview: Service-layer operations for inventory; stock arithmetic and derived stock queries.

"""
Inventory Reconciliation

WHY: Every issue transition moves stock. This module owns the arithmetic so
that creation, return, re-issue, partial return and deletion all apply their
deltas the same way.

RULES:
1. stockQuantity never goes below zero. A debit larger than the stock on hand
   clamps to 0 and produces a StockDesync warning; it never fails.
2. Deltas for items that no longer exist are skipped. Historical issues may
   reference deleted items and that is a valid state.
3. Inputs are never mutated. A new list is returned; items whose stock did not
   change are the same objects as before.
"""

from __future__ import annotations

from typing import Iterable, Mapping, NamedTuple, Optional, Sequence

from ..errors import StockDesync
from ..records import InventoryItem, Issue


class Reconciliation(NamedTuple):
    """
    Result of an engine operation: the new authoritative collections.

    `issue` is the issue the operation was about (None for bulk deletes).
    `warnings` holds any StockDesync clamps that happened along the way.
    """
    issue: Optional[Issue]
    issues: list[Issue]
    inventory: list[InventoryItem]
    warnings: list[StockDesync]


def index_inventory(inventory: Iterable[InventoryItem]) -> dict[str, InventoryItem]:
    return {item.id: item for item in inventory}


def find_item(inventory: Iterable[InventoryItem], item_id: str) -> Optional[InventoryItem]:
    for item in inventory:
        if item.id == item_id:
            return item
    return None


def apply_stock_deltas(
    inventory: Sequence[InventoryItem],
    deltas: Mapping[str, int],
) -> tuple[list[InventoryItem], list[StockDesync]]:
    """
    Apply signed per-item deltas to a copy of the inventory.

    Args:
        inventory: Current inventory (not modified)
        deltas: item_id -> signed quantity (negative debits, positive credits)

    Returns:
        Tuple of (updated_inventory, warnings)
    """
    updated: list[InventoryItem] = []
    warnings: list[StockDesync] = []

    for item in inventory:
        delta = deltas.get(item.id, 0)
        if delta == 0:
            updated.append(item)
            continue

        new_quantity = item.stock_quantity + delta
        if new_quantity < 0:
            warnings.append(
                StockDesync(
                    item_id=item.id,
                    item_name=item.name,
                    requested=-delta,
                    available=item.stock_quantity,
                )
            )
            new_quantity = 0

        updated.append(item.with_stock(new_quantity))

    return updated, warnings


def line_deltas(issue: Issue, quantities: Mapping[str, int], sign: int) -> dict[str, int]:
    """Build a delta map for the given per-line quantities of an issue."""
    deltas: dict[str, int] = {}
    for line in issue.items:
        qty = quantities.get(line.item_id, 0)
        if qty:
            deltas[line.item_id] = deltas.get(line.item_id, 0) + sign * qty
    return deltas


def outstanding_deltas(issue: Issue, sign: int = 1) -> dict[str, int]:
    """Deltas for the units of an issue that are still out with the employee."""
    return line_deltas(issue, {line.item_id: line.outstanding for line in issue.items}, sign)


def full_deltas(issue: Issue, sign: int = -1) -> dict[str, int]:
    """Deltas for every unit on an issue, regardless of what was returned."""
    return line_deltas(issue, {line.item_id: line.quantity for line in issue.items}, sign)


def low_stock(inventory: Iterable[InventoryItem]) -> list[InventoryItem]:
    """Items at or below their reorder threshold. Always computed from current state."""
    return [item for item in inventory if item.is_low_stock]


def total_stock(inventory: Iterable[InventoryItem]) -> int:
    return sum(item.stock_quantity for item in inventory)
