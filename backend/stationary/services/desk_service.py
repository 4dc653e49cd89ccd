# Overview: Service-layer operations for the issue desk; load, run an engine operation, save, log.

"""
Issue Desk Service

WHY: The engine functions are pure. Something has to read the stored data set,
hand it to them, and write back what they return. That is all this module does.

Every operation follows the same shape:
1. load_data_set()            (full read)
2. call the engine / catalog  (raises on any rejected input)
3. save_data_set()            (full overwrite, single commit)
4. log the change, and a WARNING for each StockDesync clamp

If step 2 raises, step 3 never runs and the session is rolled back, so the
stored state is exactly what it was before.

Permission checks are done by the caller (see decorators.with_actor); the actor
passed in here is recorded on new issues and in the log.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from flask import current_app

from ..errors import StationaryError, StockDesync
from ..extensions import db
from ..records import Actor, DataSet, Employee, InventoryItem, Issue
from . import catalog_service, issue_service, lifecycle_service, storage_service
from .inventory_service import Reconciliation
from .issue_service import IssueRequest

T = TypeVar("T")


def _run(action: str, op: Callable[[], T]) -> T:
    try:
        return op()
    except StationaryError:
        db.session.rollback()
        raise
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise


def _log_warnings(warnings: Sequence[StockDesync]) -> None:
    for warning in warnings:
        current_app.logger.warning(str(warning))


def _save_reconciliation(data_set: DataSet, result: Reconciliation) -> None:
    storage_service.save_data_set(
        replace(data_set, issues=tuple(result.issues), inventory=tuple(result.inventory))
    )
    _log_warnings(result.warnings)


# =============================================================================
# ISSUES
# =============================================================================

def submit_issue(request: IssueRequest | Mapping[str, Any], *, actor: Actor) -> Reconciliation:
    """Create a pending issue and reserve its stock."""
    if not isinstance(request, IssueRequest):
        request = IssueRequest.from_dict(request)

    def _op():
        data_set = storage_service.load_data_set()
        result = issue_service.create_issue(
            request,
            data_set.inventory,
            data_set.employees,
            actor=actor,
            issues=data_set.issues,
        )
        _save_reconciliation(data_set, result)
        current_app.logger.info(
            "Issue %s created by %s for %s (%d units)",
            result.issue.id, actor.employee_id, result.issue.employee_id, result.issue.total_quantity,
        )
        return result

    return _run("create issue", _op)


def sign_issue(issue_id: str, signature: str, *, actor: Actor) -> Issue:
    """Record the employee's signature; the issue becomes issued."""
    def _op():
        data_set = storage_service.load_data_set()
        issues = lifecycle_service.complete_signature(issue_id, signature, data_set.issues)
        storage_service.save_data_set(replace(data_set, issues=tuple(issues)))
        issue = lifecycle_service.find_issue(issues, issue_id)
        current_app.logger.info(
            "Issue %s signed by %s (recorded by %s)", issue_id, issue.employee_name, actor.employee_id
        )
        return issue

    return _run("sign issue", _op)


def change_status(issue_id: str, status: str, *, actor: Actor) -> Reconciliation:
    """Move an issue between issued and returned."""
    def _op():
        data_set = storage_service.load_data_set()
        before = lifecycle_service.find_issue(data_set.issues, issue_id).status
        result = lifecycle_service.transition_issue(issue_id, status, data_set.issues, data_set.inventory)
        if before == status:
            current_app.logger.info("Issue %s already %s; nothing to do", issue_id, status)
            return result
        _save_reconciliation(data_set, result)
        current_app.logger.info("Issue %s moved %s -> %s by %s", issue_id, before, status, actor.employee_id)
        return result

    return _run("change issue status", _op)


def return_issue_items(issue_id: str, quantities: Mapping[str, int], *, actor: Actor) -> Reconciliation:
    """Return part of an issued issue to stock."""
    def _op():
        data_set = storage_service.load_data_set()
        result = lifecycle_service.return_items(issue_id, quantities, data_set.issues, data_set.inventory)
        _save_reconciliation(data_set, result)
        current_app.logger.info(
            "Issue %s: %d unit(s) returned by %s, status %s",
            issue_id, sum(int(q) for q in quantities.values()), actor.employee_id, result.issue.status,
        )
        return result

    return _run("return issue items", _op)


def remove_issues(issue_ids: Iterable[str], *, actor: Actor, restore_stock: bool = True) -> Reconciliation:
    """Delete issues from history, restoring held stock unless told not to."""
    ids = list(issue_ids)

    def _op():
        data_set = storage_service.load_data_set()
        result = issue_service.delete_issues(ids, data_set.issues, data_set.inventory, restore_stock=restore_stock)
        _save_reconciliation(data_set, result)
        current_app.logger.info(
            "%d issue(s) deleted by %s (stock %s)",
            len(data_set.issues) - len(result.issues), actor.employee_id,
            "restored" if restore_stock else "left as is",
        )
        return result

    return _run("delete issues", _op)


def clear_issue_history(*, actor: Actor, restore_stock: bool = True) -> Reconciliation:
    def _op():
        data_set = storage_service.load_data_set()
        result = issue_service.clear_history(data_set.issues, data_set.inventory, restore_stock=restore_stock)
        _save_reconciliation(data_set, result)
        current_app.logger.info("Issue history cleared by %s (%d issues)", actor.employee_id, len(data_set.issues))
        return result

    return _run("clear issue history", _op)


# =============================================================================
# REFERENCE DATA
# =============================================================================

def add_item(payload: Mapping[str, Any], *, actor: Actor) -> InventoryItem:
    def _op():
        data_set = storage_service.load_data_set()
        item, inventory = catalog_service.add_item(payload, data_set.inventory, data_set.categories)
        storage_service.save_data_set(replace(data_set, inventory=tuple(inventory)))
        current_app.logger.info("Item %s (%s) added by %s", item.id, item.name, actor.employee_id)
        return item

    return _run("add item", _op)


def update_item(item_id: str, changes: Mapping[str, Any], *, actor: Actor) -> InventoryItem:
    def _op():
        data_set = storage_service.load_data_set()
        item, inventory = catalog_service.update_item(item_id, changes, data_set.inventory, data_set.categories)
        storage_service.save_data_set(replace(data_set, inventory=tuple(inventory)))
        current_app.logger.info("Item %s updated by %s: %s", item_id, actor.employee_id, ", ".join(changes))
        return item

    return _run("update item", _op)


def delete_item(item_id: str, *, actor: Actor) -> None:
    def _op():
        data_set = storage_service.load_data_set()
        inventory = catalog_service.delete_item(item_id, data_set.inventory)
        storage_service.save_data_set(replace(data_set, inventory=tuple(inventory)))
        current_app.logger.info("Item %s deleted by %s", item_id, actor.employee_id)

    return _run("delete item", _op)


def add_employee(payload: Mapping[str, Any], *, actor: Actor) -> Employee:
    def _op():
        data_set = storage_service.load_data_set()
        employee, employees = catalog_service.add_employee(payload, data_set.employees)
        storage_service.save_data_set(replace(data_set, employees=tuple(employees)))
        current_app.logger.info("Employee %s added by %s", employee.id, actor.employee_id)
        return employee

    return _run("add employee", _op)


def update_employee(original_id: str, payload: Mapping[str, Any], *, actor: Actor) -> Employee:
    def _op():
        data_set = storage_service.load_data_set()
        employee, employees = catalog_service.update_employee(original_id, payload, data_set.employees)
        storage_service.save_data_set(replace(data_set, employees=tuple(employees)))
        current_app.logger.info("Employee %s updated by %s", original_id, actor.employee_id)
        return employee

    return _run("update employee", _op)


def delete_employee(employee_id: str, *, actor: Actor) -> None:
    def _op():
        data_set = storage_service.load_data_set()
        employees = catalog_service.delete_employee(employee_id, data_set.employees)
        storage_service.save_data_set(replace(data_set, employees=tuple(employees)))
        current_app.logger.info("Employee %s deleted by %s", employee_id, actor.employee_id)

    return _run("delete employee", _op)


def add_category(name: str, *, actor: Actor) -> list[str]:
    def _op():
        data_set = storage_service.load_data_set()
        categories = catalog_service.add_category(name, data_set.categories)
        storage_service.save_data_set(replace(data_set, categories=tuple(categories)))
        current_app.logger.info("Category %r added by %s", name, actor.employee_id)
        return categories

    return _run("add category", _op)


def rename_category(old_name: str, new_name: str, *, actor: Actor) -> list[str]:
    def _op():
        data_set = storage_service.load_data_set()
        categories, inventory = catalog_service.rename_category(
            old_name, new_name, data_set.categories, data_set.inventory
        )
        storage_service.save_data_set(
            replace(data_set, categories=tuple(categories), inventory=tuple(inventory))
        )
        current_app.logger.info("Category %r renamed to %r by %s", old_name, new_name, actor.employee_id)
        return categories

    return _run("rename category", _op)


def delete_category(name: str, *, actor: Actor) -> list[str]:
    def _op():
        data_set = storage_service.load_data_set()
        categories = catalog_service.delete_category(name, data_set.categories, data_set.inventory)
        storage_service.save_data_set(replace(data_set, categories=tuple(categories)))
        current_app.logger.info("Category %r deleted by %s", name, actor.employee_id)
        return categories

    return _run("delete category", _op)
