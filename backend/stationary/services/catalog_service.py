# Overview: Service-layer operations for reference data; inventory items, employees and categories.

"""
Catalog Service

WHY: Items, employees and categories are the reference data issues point at.
Editing them never rewrites history: issues keep the names they were created
with, and deleting an item or employee leaves its issues in place.

CATEGORY POLICY:
- Category names are unique, compared case-insensitively
- Renaming a category renames it on every item that uses it
- Deleting a category that any item still uses is refused (CategoryInUse)

Like the engine, every function takes collections and returns new ones.
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Iterable, Mapping, Sequence

from ..errors import StationaryError, UnknownEmployee, UnknownItem
from ..records import DEFAULT_UNIT, Employee, InventoryItem
from ..validation import ConflictError, coerce_text


ITEM_FIELDS = ("name", "category", "stockQuantity", "unit", "threshold")


class CatalogError(StationaryError):
    """Raised for invalid reference data changes."""
    pass


class CategoryInUse(CatalogError):
    def __init__(self, category: str, item_count: int):
        self.category = category
        self.item_count = item_count
        super().__init__(
            f"Category '{category}' is used by {item_count} item(s); reassign them before deleting it"
        )


# =============================================================================
# INVENTORY ITEMS
# =============================================================================

def generate_item_id(existing_ids: Iterable[str] = ()) -> str:
    """Millisecond timestamp id, bumped until it is free."""
    taken = set(existing_ids)
    candidate = int(time.time() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def _check_category(category: str, categories: Sequence[str]) -> None:
    if category not in categories:
        raise CatalogError(f"Unknown category '{category}'")


def _index_of_item(inventory: Sequence[InventoryItem], item_id: str) -> int:
    for i, item in enumerate(inventory):
        if item.id == item_id:
            return i
    raise UnknownItem(item_id)


def add_item(
    payload: Mapping[str, Any],
    inventory: Sequence[InventoryItem],
    categories: Sequence[str],
) -> tuple[InventoryItem, list[InventoryItem]]:
    """
    Add an item to inventory with a generated id.

    Args:
        payload: name, category, stockQuantity, unit (default "pcs"), threshold (default 0)

    Raises:
        InvalidRecord: If a field is missing or negative
        CatalogError: If the category is not in the category set
    """
    data = {
        "id": generate_item_id(item.id for item in inventory),
        "name": payload.get("name"),
        "category": payload.get("category"),
        "stockQuantity": payload.get("stockQuantity", 0),
        "unit": payload.get("unit") or DEFAULT_UNIT,
        "threshold": payload.get("threshold", 0),
    }
    item = InventoryItem.from_dict(data)
    _check_category(item.category, categories)
    return item, [*inventory, item]


def update_item(
    item_id: str,
    changes: Mapping[str, Any],
    inventory: Sequence[InventoryItem],
    categories: Sequence[str],
) -> tuple[InventoryItem, list[InventoryItem]]:
    """
    Edit an item's fields. The id can not change.

    A manual stock edit here is outside the issue lifecycle; issues already
    recorded are not adjusted.
    """
    index = _index_of_item(inventory, item_id)
    unknown = [key for key in changes if key not in ITEM_FIELDS]
    if unknown:
        raise CatalogError(f"Field not allowed: {', '.join(unknown)}")

    data = {**inventory[index].to_dict(), **changes, "id": item_id}
    item = InventoryItem.from_dict(data)
    if "category" in changes:
        _check_category(item.category, categories)

    updated = list(inventory)
    updated[index] = item
    return item, updated


def delete_item(item_id: str, inventory: Sequence[InventoryItem]) -> list[InventoryItem]:
    """Remove an item. Issues that reference it keep their itemName snapshot."""
    _index_of_item(inventory, item_id)
    return [item for item in inventory if item.id != item_id]


def search_items(inventory: Iterable[InventoryItem], query: str) -> list[InventoryItem]:
    """Case-insensitive match on name, category or id. Blank query returns everything."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(inventory)
    return [
        item for item in inventory
        if needle in item.name.lower()
        or needle in item.category.lower()
        or needle in item.id.lower()
    ]


# =============================================================================
# EMPLOYEES
# =============================================================================

def add_employee(
    payload: Mapping[str, Any],
    employees: Sequence[Employee],
) -> tuple[Employee, list[Employee]]:
    """
    Add an employee. The id is chosen by the operator and must be unique.

    Raises:
        InvalidRecord: If id, name or department is missing
        ConflictError: If the id is already in use
    """
    employee = Employee.from_dict(dict(payload))
    if any(e.id == employee.id for e in employees):
        raise ConflictError(f"Employee ID '{employee.id}' already exists. Please use a unique ID.")
    return employee, [*employees, employee]


def update_employee(
    original_id: str,
    payload: Mapping[str, Any],
    employees: Sequence[Employee],
) -> tuple[Employee, list[Employee]]:
    """Replace an employee's details; a new id must not clash with another employee."""
    if not any(e.id == original_id for e in employees):
        raise UnknownEmployee(original_id)

    employee = Employee.from_dict(dict(payload))
    if employee.id != original_id and any(e.id == employee.id for e in employees):
        raise ConflictError(f"Employee ID '{employee.id}' is already in use. Please use a unique ID.")

    return employee, [employee if e.id == original_id else e for e in employees]


def delete_employee(employee_id: str, employees: Sequence[Employee]) -> list[Employee]:
    """Remove an employee. Their issues keep the employeeName snapshot."""
    if not any(e.id == employee_id for e in employees):
        raise UnknownEmployee(employee_id)
    return [e for e in employees if e.id != employee_id]


# =============================================================================
# CATEGORIES
# =============================================================================

def _find_category(categories: Sequence[str], name: str) -> int:
    for i, category in enumerate(categories):
        if category == name:
            return i
    raise CatalogError(f"Category '{name}' not found")


def _ensure_unique(name: str, categories: Sequence[str], *, skip: int | None = None) -> None:
    lowered = name.lower()
    for i, category in enumerate(categories):
        if i != skip and category.lower() == lowered:
            raise ConflictError("This category already exists")


def add_category(name: str, categories: Sequence[str]) -> list[str]:
    name = coerce_text("category", name)
    _ensure_unique(name, categories)
    return [*categories, name]


def rename_category(
    old_name: str,
    new_name: str,
    categories: Sequence[str],
    inventory: Sequence[InventoryItem],
) -> tuple[list[str], list[InventoryItem]]:
    """Rename a category and move every item in it to the new name."""
    index = _find_category(categories, old_name)
    new_name = coerce_text("category", new_name)
    _ensure_unique(new_name, categories, skip=index)

    updated_categories = list(categories)
    updated_categories[index] = new_name
    updated_inventory = [
        replace(item, category=new_name) if item.category == old_name else item
        for item in inventory
    ]
    return updated_categories, updated_inventory


def delete_category(
    name: str,
    categories: Sequence[str],
    inventory: Sequence[InventoryItem],
) -> list[str]:
    """
    Remove a category.

    Raises:
        CategoryInUse: If any item is still in this category
    """
    _find_category(categories, name)
    in_use = sum(1 for item in inventory if item.category == name)
    if in_use:
        raise CategoryInUse(name, in_use)
    return [c for c in categories if c != name]
