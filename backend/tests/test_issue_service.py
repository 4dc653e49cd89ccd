"""
Issue creation and deletion tests.

Verifies:
- Creating an issue reserves stock immediately and records who asked
- Every rejected request leaves inventory and history untouched
- Deleting issues hands back the stock they still hold (unless told not to)
"""

from datetime import date

import pytest

from stationary.errors import (
    EmptyIssue,
    InsufficientStock,
    InvalidQuantity,
    StockDesync,
    UnknownEmployee,
    UnknownItem,
)
from stationary.records import Issue, IssuedItem, STATUS_ISSUED, STATUS_PENDING, STATUS_RETURNED
from stationary.services import issue_service
from stationary.services.inventory_service import find_item
from stationary.services.issue_service import IssueRequest
from stationary.validation import ValidationError


def _request(employee_id="E1", *lines):
    return IssueRequest(employee_id=employee_id, items=tuple(lines))


def _stock(inventory, item_id):
    return find_item(inventory, item_id).stock_quantity


def _issue(issue_id, status, lines, **extra):
    if status != STATUS_PENDING:
        extra.setdefault("signature_data", "data:image/png;base64,AAAA")
    return Issue(
        id=issue_id,
        employee_id="E1",
        employee_name="Sam Lee",
        department="Finance",
        items=tuple(lines),
        issue_date=extra.pop("issue_date", date(2026, 3, 1)),
        status=status,
        **extra,
    )


# =============================================================================
# CREATE
# =============================================================================


class TestCreateIssue:
    """A valid request becomes a pending issue with stock already deducted."""

    def test_reserves_stock_and_starts_pending(self, inventory, employees, admin_actor, issue_day):
        result = issue_service.create_issue(
            _request("E1", ("pen", 5), ("paper", 2)),
            inventory, employees, actor=admin_actor, today=issue_day,
        )

        assert result.issue.status == STATUS_PENDING
        assert result.issue.issue_date == issue_day
        assert result.issue.created_by == admin_actor
        assert result.issue.signature_data is None
        assert _stock(result.inventory, "pen") == 45
        assert _stock(result.inventory, "paper") == 18
        assert result.issues == [result.issue]
        assert result.warnings == []

    def test_snapshots_names(self, inventory, employees, admin_actor):
        issue = issue_service.create_issue(
            _request("E2", ("paper", 1)), inventory, employees, actor=admin_actor,
        ).issue

        assert issue.employee_name == "Jo Park"
        assert issue.department == "Operations"
        assert issue.items[0].item_name == "A4 Paper"
        assert issue.items[0].returned == 0

    def test_caller_collections_untouched(self, inventory, employees, admin_actor):
        issues = []
        issue_service.create_issue(
            _request("E1", ("pen", 5)), inventory, employees, actor=admin_actor, issues=issues,
        )

        assert _stock(inventory, "pen") == 50
        assert issues == []

    def test_whole_stock_can_be_issued(self, inventory, employees, admin_actor):
        result = issue_service.create_issue(
            _request("E1", ("paper", 20)), inventory, employees, actor=admin_actor,
        )
        assert _stock(result.inventory, "paper") == 0

    def test_duplicate_lines_are_merged(self, inventory, employees, admin_actor):
        result = issue_service.create_issue(
            _request("E1", ("pen", 3), ("paper", 1), ("pen", 4)),
            inventory, employees, actor=admin_actor,
        )

        assert [(line.item_id, line.quantity) for line in result.issue.items] == [("pen", 7), ("paper", 1)]
        assert _stock(result.inventory, "pen") == 43

    def test_merged_lines_checked_against_stock(self, inventory, employees, admin_actor):
        with pytest.raises(InsufficientStock):
            issue_service.create_issue(
                _request("E1", ("paper", 15), ("paper", 10)), inventory, employees, actor=admin_actor,
            )

    def test_numeric_strings_accepted(self, inventory, employees, admin_actor):
        result = issue_service.create_issue(
            _request("E1", ("pen", "3")), inventory, employees, actor=admin_actor,
        )
        assert result.issue.items[0].quantity == 3

    def test_ids_are_unique(self, inventory, employees, admin_actor):
        first = issue_service.create_issue(
            _request("E1", ("pen", 1)), inventory, employees, actor=admin_actor,
        )
        second = issue_service.create_issue(
            _request("E1", ("pen", 1)), first.inventory, employees, actor=admin_actor, issues=first.issues,
        )

        assert first.issue.id != second.issue.id
        assert len(second.issues) == 2
        assert second.issue.id.endswith("-E1")

    def test_request_from_dict(self):
        request = IssueRequest.from_dict({
            "employeeId": " E1 ",
            "items": [{"itemId": "pen", "quantity": 2}, {"itemId": "paper", "quantity": "1"}],
        })
        assert request.employee_id == "E1"
        assert request.items == (("pen", 2), ("paper", "1"))

    def test_request_without_items_is_empty(self, inventory, employees, admin_actor):
        request = IssueRequest.from_dict({"employeeId": "E1"})
        assert request.items == ()
        with pytest.raises(EmptyIssue):
            issue_service.create_issue(request, inventory, employees, actor=admin_actor)


class TestCreateIssueRejections:
    """Nothing is created and no stock moves when a request is rejected."""

    def test_unknown_employee(self, inventory, employees, admin_actor):
        with pytest.raises(UnknownEmployee):
            issue_service.create_issue(_request("E9", ("pen", 1)), inventory, employees, actor=admin_actor)

    def test_unknown_employee_checked_before_lines(self, inventory, employees, admin_actor):
        with pytest.raises(UnknownEmployee):
            issue_service.create_issue(_request("E9"), inventory, employees, actor=admin_actor)

    def test_empty_issue(self, inventory, employees, admin_actor):
        with pytest.raises(EmptyIssue):
            issue_service.create_issue(_request("E1"), inventory, employees, actor=admin_actor)

    @pytest.mark.parametrize("quantity", [0, -2, "2.5", "1e3", 1.5, True, None, "abc"])
    def test_invalid_quantity(self, inventory, employees, admin_actor, quantity):
        with pytest.raises(InvalidQuantity):
            issue_service.create_issue(
                _request("E1", ("pen", quantity)), inventory, employees, actor=admin_actor,
            )

    def test_unknown_item(self, inventory, employees, admin_actor):
        with pytest.raises(UnknownItem) as exc:
            issue_service.create_issue(
                _request("E1", ("pen", 1), ("stapler", 1)), inventory, employees, actor=admin_actor,
            )
        assert exc.value.item_id == "stapler"

    def test_insufficient_stock(self, inventory, employees, admin_actor):
        with pytest.raises(InsufficientStock) as exc:
            issue_service.create_issue(
                _request("E1", ("pen", 1), ("paper", 21)), inventory, employees, actor=admin_actor,
            )

        assert exc.value.requested == 21
        assert exc.value.available == 20
        assert "A4 Paper" in str(exc.value)
        # First line was valid but nothing was deducted
        assert _stock(inventory, "pen") == 50


# =============================================================================
# DELETE
# =============================================================================


class TestDeleteIssues:

    def test_pending_issue_stock_restored(self, inventory, employees, admin_actor):
        created = issue_service.create_issue(
            _request("E1", ("pen", 5)), inventory, employees, actor=admin_actor,
        )
        result = issue_service.delete_issues([created.issue.id], created.issues, created.inventory)

        assert result.issues == []
        assert _stock(result.inventory, "pen") == 50

    def test_keep_stock(self, inventory, employees, admin_actor):
        created = issue_service.create_issue(
            _request("E1", ("pen", 5)), inventory, employees, actor=admin_actor,
        )
        result = issue_service.delete_issues(
            [created.issue.id], created.issues, created.inventory, restore_stock=False,
        )

        assert result.issues == []
        assert _stock(result.inventory, "pen") == 45

    def test_returned_issue_not_credited_twice(self, inventory):
        returned = _issue("r1", STATUS_RETURNED, [IssuedItem("pen", "Blue Pen", 5, returned=5)])
        result = issue_service.delete_issues(["r1"], [returned], inventory)

        assert _stock(result.inventory, "pen") == 50

    def test_partially_returned_restores_outstanding(self, inventory):
        partial = _issue("p1", STATUS_ISSUED, [IssuedItem("pen", "Blue Pen", 5, returned=2)])
        result = issue_service.delete_issues(["p1"], [partial], inventory)

        assert _stock(result.inventory, "pen") == 53

    def test_unknown_ids_ignored(self, inventory):
        issued = _issue("i1", STATUS_ISSUED, [IssuedItem("pen", "Blue Pen", 1)])
        result = issue_service.delete_issues(["nope"], [issued], inventory)

        assert result.issues == [issued]
        assert result.inventory == inventory

    def test_deleted_item_skipped(self, paper):
        issued = _issue("i1", STATUS_ISSUED, [IssuedItem("pen", "Blue Pen", 3), IssuedItem("paper", "A4 Paper", 1)])
        result = issue_service.delete_issues(["i1"], [issued], [paper])

        assert result.inventory == [paper.with_stock(21)]
        assert result.warnings == []

    def test_clear_history(self, inventory):
        issues = [
            _issue("a", STATUS_PENDING, [IssuedItem("pen", "Blue Pen", 2)]),
            _issue("b", STATUS_ISSUED, [IssuedItem("pen", "Blue Pen", 3)]),
            _issue("c", STATUS_RETURNED, [IssuedItem("paper", "A4 Paper", 4, returned=4)]),
        ]
        result = issue_service.clear_history(issues, inventory)

        assert result.issues == []
        assert _stock(result.inventory, "pen") == 55
        assert _stock(result.inventory, "paper") == 20


# =============================================================================
# QUERIES
# =============================================================================


class TestQueries:

    def test_pending_signatures(self):
        issues = [
            _issue("a", STATUS_PENDING, [IssuedItem("pen", "Blue Pen", 2)]),
            _issue("b", STATUS_ISSUED, [IssuedItem("pen", "Blue Pen", 3)]),
        ]
        assert [i.id for i in issue_service.pending_signatures(issues)] == ["a"]

    def test_issues_for_employee(self):
        issues = [_issue("a", STATUS_PENDING, [IssuedItem("pen", "Blue Pen", 2)])]
        assert issue_service.issues_for_employee(issues, "E1") == issues
        assert issue_service.issues_for_employee(issues, "E2") == []

    def test_summarize_warnings(self):
        assert issue_service.summarize_warnings([]) is None
        summary = issue_service.summarize_warnings([StockDesync("pen", "Blue Pen", 5, 2)])
        assert "Blue Pen" in summary
        assert "clamped to 0" in summary


class TestIssueRequestShape:
    """Malformed submissions fail with a typed error before any engine work."""

    @pytest.mark.parametrize("items", ["pen:3", ["pen"], [["pen", 3]], {"itemId": "pen", "quantity": 3}])
    def test_items_must_be_list_of_objects(self, items):
        with pytest.raises(ValidationError):
            IssueRequest.from_dict({"employeeId": "E1", "items": items})

    def test_line_missing_quantity(self):
        with pytest.raises(ValidationError) as exc:
            IssueRequest.from_dict({"employeeId": "E1", "items": [{"itemId": "pen"}]})
        assert "quantity" in str(exc.value)

    @pytest.mark.parametrize("employee_id", [None, "", "   "])
    def test_missing_employee_id(self, employee_id):
        with pytest.raises(ValidationError) as exc:
            IssueRequest.from_dict({"employeeId": employee_id, "items": [{"itemId": "pen", "quantity": 1}]})
        assert "employeeId" in str(exc.value)
        assert "None" not in str(exc.value)

    def test_not_an_object(self):
        with pytest.raises(ValidationError):
            IssueRequest.from_dict(["E1", "pen:3"])
