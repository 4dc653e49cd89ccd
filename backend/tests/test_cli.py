"""
CLI tests.

Verifies:
- First admin bootstrap only works on an empty account store
- State-changing commands authenticate --as and enforce role permissions
- The issue desk flow works end to end from the command line
"""

import json

import pytest

from stationary.records import STATUS_ISSUED, STATUS_PENDING, STATUS_RETURNED
from stationary.services import storage_service

from conftest import ADMIN_PASSWORD, GUEST_PASSWORD


def _as_admin(*args):
    return [*args, "--as", "admin", "--password", ADMIN_PASSWORD]


def _stock(item_id):
    return next(i.stock_quantity for i in storage_service.load_data_set().inventory if i.id == item_id)


# =============================================================================
# BOOTSTRAP
# =============================================================================


class TestBootstrap:

    def test_init_points_to_create_admin(self, runner, db_session):
        result = runner.invoke(args=["system", "init"])
        assert "PASS Storage ready." in result.output
        assert "users create-admin" in result.output

    def test_create_admin_once(self, runner, db_session):
        args = ["users", "create-admin", "--employee-id", "admin", "--name", "Office Admin",
                "--password", ADMIN_PASSWORD]

        first = runner.invoke(args=args)
        assert "PASS Created admin: admin" in first.output

        second = runner.invoke(args=args)
        assert "FAIL Accounts already exist" in second.output

    def test_create_admin_weak_password(self, runner, db_session):
        result = runner.invoke(args=["users", "create-admin", "--employee-id", "admin",
                                     "--name", "Office Admin", "--password", "weak"])
        assert "FAIL Password validation failed" in result.output

    def test_create_user_requires_admin(self, runner, admin_account, guest_account):
        denied = runner.invoke(args=["users", "create", "--role", "Guest", "--name", "New Person",
                                     "--employee-id", "E7", "--new-password", GUEST_PASSWORD,
                                     "--as", "guest", "--password", GUEST_PASSWORD])
        assert "does not have permission: canManageUsers" in denied.output

        allowed = runner.invoke(args=_as_admin("users", "create", "--role", "Guest", "--name", "New Person",
                                               "--employee-id", "E7", "--new-password", GUEST_PASSWORD))
        assert "PASS Created user: E7" in allowed.output

        listing = runner.invoke(args=_as_admin("users", "list"))
        assert "E7" in listing.output


# =============================================================================
# AUTHENTICATION
# =============================================================================


class TestAuthentication:

    def test_wrong_password(self, runner, seeded, admin_account):
        result = runner.invoke(args=["categories", "add", "Desk", "--as", "admin", "--password", "Wrong!pass1"])

        assert "FAIL Invalid employee ID or password" in result.output
        assert storage_service.load_data_set().categories == ("Writing", "Paper")

    def test_guest_cannot_edit(self, runner, seeded, guest_account):
        result = runner.invoke(args=["items", "update", "pen", "--stock", "99",
                                     "--as", "guest", "--password", GUEST_PASSWORD])

        assert "does not have permission: canEdit" in result.output
        assert _stock("pen") == 50

    def test_as_is_required(self, runner, seeded):
        result = runner.invoke(args=["categories", "add", "Desk"])
        assert result.exit_code != 0

    def test_reset_password_is_prompted(self, runner, admin_account, guest_account):
        new_password = "N3w!guestpass"
        result = runner.invoke(
            args=_as_admin("users", "update", "guest", "--reset-password"),
            input=f"{new_password}\n{new_password}\n",
        )

        assert "PASS Updated guest" in result.output
        assert new_password not in result.output

        relogin = runner.invoke(args=["categories", "list", "--as", "guest", "--password", new_password])
        assert "FAIL" not in relogin.output


# =============================================================================
# ISSUE FLOW
# =============================================================================


class TestIssueFlow:

    def test_create_sign_return(self, runner, seeded, admin_account, tmp_path):
        created = runner.invoke(args=_as_admin("issues", "create", "--employee", "E1",
                                               "--item", "pen:3", "--item", "paper:2"))
        assert "PASS Created issue" in created.output
        assert _stock("pen") == 47

        issue_id = storage_service.load_data_set().issues[0].id

        pending = runner.invoke(args=_as_admin("issues", "pending"))
        assert issue_id in pending.output

        early = runner.invoke(args=_as_admin("issues", "status", issue_id, "issued"))
        assert "FAIL" in early.output
        assert storage_service.load_data_set().issues[0].status == STATUS_PENDING

        signature = tmp_path / "sig.txt"
        signature.write_text("data:image/png;base64,iVBORw0KGgo=", encoding="utf-8")
        signed = runner.invoke(args=_as_admin("issues", "sign", issue_id, "--signature-file", str(signature)))
        assert "Successfully signed by Sam Lee" in signed.output
        assert storage_service.load_data_set().issues[0].status == STATUS_ISSUED

        partial = runner.invoke(args=_as_admin("issues", "return", issue_id, "--item", "pen:1"))
        assert "Blue Pen: 1/3 returned" in partial.output
        assert _stock("pen") == 48

        closed = runner.invoke(args=_as_admin("issues", "status", issue_id, "returned"))
        assert f"PASS Issue {issue_id} is now returned" in closed.output
        assert storage_service.load_data_set().issues[0].status == STATUS_RETURNED
        assert _stock("pen") == 50
        assert _stock("paper") == 20

    def test_guest_can_create_but_not_delete(self, runner, seeded, guest_account):
        created = runner.invoke(args=["issues", "create", "--employee", "E2", "--item", "paper:1",
                                      "--as", "guest", "--password", GUEST_PASSWORD])
        assert "PASS Created issue" in created.output

        issue = storage_service.load_data_set().issues[0]
        assert issue.created_by.employee_id == "guest"

        denied = runner.invoke(args=["issues", "delete", issue.id,
                                     "--as", "guest", "--password", GUEST_PASSWORD])
        assert "does not have permission: canDelete" in denied.output
        assert len(storage_service.load_data_set().issues) == 1

    def test_insufficient_stock_reported(self, runner, seeded, admin_account):
        result = runner.invoke(args=_as_admin("issues", "create", "--employee", "E1", "--item", "paper:21"))

        assert "FAIL Not enough stock for A4 Paper" in result.output
        assert storage_service.load_data_set().issues == ()

    def test_bad_item_format(self, runner, seeded, admin_account):
        result = runner.invoke(args=_as_admin("issues", "create", "--employee", "E1", "--item", "pen"))
        assert result.exit_code == 2

    def test_signature_file_must_be_text(self, runner, seeded, admin_account, tmp_path):
        runner.invoke(args=_as_admin("issues", "create", "--employee", "E1", "--item", "pen:1"))
        issue_id = storage_service.load_data_set().issues[0].id
        signature = tmp_path / "sig.bin"
        signature.write_bytes(b"\xff\xd8\xff\xe0")

        result = runner.invoke(args=_as_admin("issues", "sign", issue_id, "--signature-file", str(signature)))

        assert result.exit_code == 2
        assert "UTF-8" in result.output
        assert storage_service.load_data_set().issues[0].status == STATUS_PENDING

    def test_delete_restores_stock(self, runner, seeded, admin_account):
        runner.invoke(args=_as_admin("issues", "create", "--employee", "E1", "--item", "pen:5"))
        issue_id = storage_service.load_data_set().issues[0].id

        result = runner.invoke(args=_as_admin("issues", "delete", issue_id))

        assert "PASS Deleted issues; 0 remain" in result.output
        assert _stock("pen") == 50

    def test_list_and_stats(self, runner, seeded, admin_account):
        runner.invoke(args=_as_admin("issues", "create", "--employee", "E2", "--item", "paper:16"))

        listing = runner.invoke(args=_as_admin("issues", "list", "--search", "jo park"))
        assert "Jo Park" in listing.output

        low = runner.invoke(args=_as_admin("items", "list", "--low-stock"))
        assert "A4 Paper" in low.output
        assert "Blue Pen" not in low.output

        stats = runner.invoke(args=_as_admin("system", "stats"))
        assert "pendingIssues" in stats.output
        assert "Recent activity" in stats.output


# =============================================================================
# REFERENCE DATA AND BACKUPS
# =============================================================================


class TestReferenceData:

    def test_category_in_use(self, runner, seeded, admin_account):
        result = runner.invoke(args=_as_admin("categories", "delete", "Paper"))
        assert "used by 1 item(s)" in result.output

    def test_add_item_and_employee(self, runner, seeded, admin_account):
        added = runner.invoke(args=_as_admin("items", "add", "--name", "Stapler", "--category", "Writing",
                                             "--stock", "4"))
        assert "PASS Added Stapler" in added.output

        employee = runner.invoke(args=_as_admin("employees", "add", "--id", "E3", "--name", "Ana Cruz",
                                                "--department", "Legal"))
        assert "PASS Added employee Ana Cruz (E3)" in employee.output

        duplicate = runner.invoke(args=_as_admin("employees", "add", "--id", "E3", "--name", "Twin",
                                                 "--department", "Legal"))
        assert "FAIL Employee ID 'E3' already exists" in duplicate.output

    LISTINGS = [
        ["employees", "list"], ["categories", "list"], ["items", "list"],
        ["issues", "list"], ["issues", "pending"], ["system", "stats"],
    ]

    @pytest.mark.parametrize("command", LISTINGS)
    def test_listings_need_a_signed_in_viewer(self, runner, seeded, guest_account, command):
        allowed = runner.invoke(args=[*command, "--as", "guest", "--password", GUEST_PASSWORD])
        assert allowed.exit_code == 0
        assert "FAIL" not in allowed.output

        wrong = runner.invoke(args=[*command, "--as", "guest", "--password", "Wrong!pass1"])
        assert "FAIL Invalid employee ID or password" in wrong.output

        anonymous = runner.invoke(args=command)
        assert anonymous.exit_code != 0

    def test_user_roster_needs_manage_users(self, runner, admin_account, guest_account):
        denied = runner.invoke(args=["users", "list", "--as", "guest", "--password", GUEST_PASSWORD])
        assert "does not have permission: canManageUsers" in denied.output
        assert "Office Admin" not in denied.output

        allowed = runner.invoke(args=_as_admin("users", "list"))
        assert "guest" in allowed.output


class TestBackups:

    def test_export_and_import(self, runner, seeded, admin_account, tmp_path):
        exported = runner.invoke(args=_as_admin("system", "export", "--dir", str(tmp_path)))
        assert "PASS Exported to" in exported.output

        files = list(tmp_path.glob("stationary-data-backup-*.json"))
        assert len(files) == 1
        assert json.loads(files[0].read_text(encoding="utf-8"))["exportMetadata"]["totalItems"] == 2

        wiped = runner.invoke(args=_as_admin("system", "wipe", "--yes"))
        assert "Accounts were kept" in wiped.output
        assert storage_service.load_data_set().inventory == ()

        imported = runner.invoke(args=_as_admin("system", "import", str(files[0])))
        assert "PASS Successfully imported 2 inventory items" in imported.output
        assert storage_service.load_data_set() == seeded

    def test_import_rejects_bad_file(self, runner, seeded, admin_account, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"inventory": []}), encoding="utf-8")

        result = runner.invoke(args=_as_admin("system", "import", str(path)))

        assert "FAIL Import rejected: Missing required property: issues" in result.output
        assert storage_service.load_data_set() == seeded

    def test_import_rejects_binary_file(self, runner, seeded, admin_account, tmp_path):
        path = tmp_path / "photo.json"
        path.write_bytes(b"\x89PNG\r\n\x1a\n\xff")

        result = runner.invoke(args=_as_admin("system", "import", str(path)))

        assert "FAIL Import rejected: Could not parse the imported file" in result.output
        assert result.exception is None
        assert storage_service.load_data_set() == seeded
