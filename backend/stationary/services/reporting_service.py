# Overview: Service-layer operations for reporting; dashboard aggregates and issue search.

from __future__ import annotations

from typing import Iterable, Sequence

from ..records import Employee, InventoryItem, Issue, STATUS_ISSUED, STATUS_PENDING, STATUS_RETURNED
from .inventory_service import low_stock, total_stock


def dashboard_stats(
    inventory: Sequence[InventoryItem],
    issues: Sequence[Issue],
    employees: Sequence[Employee],
) -> dict:
    """
    Headline numbers for the dashboard.

    Computed from the collections passed in on every call; nothing is cached.
    totalItemsReturned counts units actually back in stock, so partial returns
    on issued issues are included.
    """
    return {
        "totalInventoryItems": len(inventory),
        "lowStockCount": len(low_stock(inventory)),
        "totalStockQuantity": total_stock(inventory),
        "totalIssues": len(issues),
        "pendingIssues": sum(1 for i in issues if i.status == STATUS_PENDING),
        "issuedIssues": sum(1 for i in issues if i.status == STATUS_ISSUED),
        "returnedIssues": sum(1 for i in issues if i.status == STATUS_RETURNED),
        "totalItemsIssued": sum(i.total_quantity for i in issues),
        "totalItemsReturned": sum(i.total_returned for i in issues),
        "totalEmployees": len(employees),
        "totalDepartments": len({e.department for e in employees}),
    }


def category_breakdown(inventory: Sequence[InventoryItem]) -> list[dict]:
    """Per-category item count, stock and low-stock share, in first-seen category order."""
    groups: dict[str, list[InventoryItem]] = {}
    for item in inventory:
        groups.setdefault(item.category, []).append(item)

    rows = []
    for category, items in groups.items():
        low = low_stock(items)
        rows.append({
            "category": category,
            "itemCount": len(items),
            "totalQuantity": total_stock(items),
            "lowStockCount": len(low),
            "lowStockPercentage": round(len(low) / max(len(items), 1) * 100),
        })
    return rows


def recent_activity(issues: Sequence[Issue], limit: int = 5) -> list[Issue]:
    """Most recent issues first, by issue date then by position in history."""
    ordered = sorted(enumerate(issues), key=lambda pair: (pair[1].issue_date, pair[0]), reverse=True)
    return [issue for _, issue in ordered[:limit]]


def search_issues(issues: Iterable[Issue], query: str) -> list[Issue]:
    """
    Case-insensitive match on issue id, employee name, department, status, or
    any line's item name. Blank query returns everything.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(issues)
    return [
        issue for issue in issues
        if needle in issue.id.lower()
        or needle in issue.employee_name.lower()
        or needle in issue.department.lower()
        or needle in issue.status.lower()
        or any(needle in line.item_name.lower() for line in issue.items)
    ]
