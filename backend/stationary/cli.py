# Overview: Flask CLI command groups for bootstrap, stock, issues, signing and backups.

# backend/stationary/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to stationary (PowerShell: $env:FLASK_APP="stationary").
# - Use: python -m flask <group> <command> [options]
# - Every command except system init/reset-db and users create-admin takes --as EMPLOYEE_ID
#   and prompts for that user's password.
#
# System bootstrap/maintenance:
# - python -m flask system init
#   Create the storage table (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data and accounts).
# - python -m flask system wipe --yes --as admin
#   Empty inventory, issues, employees and categories. Accounts are kept.
# - python -m flask system export --as admin [--dir backups]
#   Write stationary-data-backup-<timestamp>.json.
# - python -m flask system import backups/file.json --as admin
#   Validate and replace the whole data set from an export file.
# - python -m flask system stats --as admin
#   Dashboard numbers and per-category stock.
#
# Accounts:
# - python -m flask users create-admin --employee-id admin --name "Office Admin"
#   Bootstrap the first Admin (only works while no accounts exist).
# - python -m flask users create --role Guest --name "Jo Park" --employee-id E7 --as admin
# - python -m flask users update E7 --role "Admin Assistant" [--reset-password] --as admin
# - python -m flask users delete E7 --as admin
# - python -m flask users list --as admin
#
# Reference data:
# - python -m flask categories add "Paper" --as admin
# - python -m flask items add --name "A4 Paper" --category Paper --stock 50 --unit ream --threshold 5 --as admin
# - python -m flask items list [--search paper] [--low-stock] --as admin
# - python -m flask employees add --id E1 --name "Sam Lee" --department Finance --as admin
#
# Issues:
# - python -m flask issues create --employee E1 --item <item_id>:3 --item <item_id>:1 --as admin
#   Create a pending issue; stock is reserved immediately.
# - python -m flask issues sign <issue_id> --signature-file sig.txt --as admin
#   Record the employee's signature (pending -> issued).
# - python -m flask issues status <issue_id> returned --as admin
#   Move between issued and returned.
# - python -m flask issues return <issue_id> --item <item_id>:1 --as admin
#   Return part of an issued issue.
# - python -m flask issues delete <issue_id> [<issue_id> ...] [--keep-stock] --as admin
# - python -m flask issues clear --yes [--keep-stock] --as admin
# - python -m flask issues list [--status pending] [--search pens] [--employee E1] --as admin
# - python -m flask issues pending --as admin

from pathlib import Path

import click
from flask import current_app
from flask.cli import with_appcontext

from .decorators import with_actor
from .errors import StationaryError
from .extensions import db
from .permissions import CAN_DELETE, CAN_EDIT, CAN_ISSUE, CAN_MANAGE_USERS, CAN_VIEW, ROLES, ROLE_ADMIN
from .records import VALID_STATUSES
from .services import (
    auth_service,
    backup_service,
    catalog_service,
    desk_service,
    inventory_service,
    issue_service,
    reporting_service,
    storage_service,
)
from .services.auth_service import PasswordValidationError


def _parse_lines(values) -> dict:
    """Group ('ITEM_ID:QTY', ...) by item id, keeping every quantity given. Quantities are validated later."""
    lines: dict = {}
    for value in values:
        item_id, sep, quantity = value.rpartition(":")
        if not sep or not item_id.strip():
            raise click.BadParameter(f"'{value}' is not ITEM_ID:QUANTITY", param_hint="--item")
        lines.setdefault(item_id.strip(), []).append(quantity.strip())
    return lines


def _echo_warnings(warnings) -> None:
    summary = issue_service.summarize_warnings(warnings)
    if summary:
        click.echo(f"WARN  {summary}")


# =============================================================================
# SYSTEM COMMANDS
# =============================================================================

@click.group('system')
def system_group():
    """System bootstrap, backup and maintenance commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create the storage table. Safe to run more than once."""
    db.create_all()
    click.echo("PASS Storage ready.")
    if not auth_service.has_users():
        click.echo("NEXT Create the first admin: python -m flask users create-admin")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA, including accounts!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask users create-admin' to start over.")


@system_group.command('wipe')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_actor(CAN_MANAGE_USERS)
def wipe_data(yes, actor):
    """Clear inventory, issues, employees and categories. Accounts are kept."""
    if not yes:
        click.confirm("WARN This will delete all stationary data. Are you sure?", abort=True)
    backup_service.clear_all_data()
    current_app.logger.info("Data wiped by %s", actor.employee_id)
    click.echo("PASS All stationary data cleared. Accounts were kept.")


@system_group.command('export')
@click.option('--dir', 'directory', default=None, help='Target directory (defaults to EXPORT_DIR)')
@with_actor(CAN_MANAGE_USERS)
def export_data(directory, actor):
    """Export the data set to a JSON backup file."""
    try:
        path = backup_service.export_to_file(directory or current_app.config["EXPORT_DIR"])
    except StationaryError as e:
        click.echo(f"FAIL Export failed: {e}")
        return
    click.echo(f"PASS Exported to {path}")


@system_group.command('import')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@with_actor(CAN_MANAGE_USERS)
def import_data(path, actor):
    """Replace the data set with the contents of an export file."""
    try:
        data_set = backup_service.import_from_file(path)
    except StationaryError as e:
        click.echo(f"FAIL Import rejected: {e}")
        return
    click.echo(
        f"PASS Successfully imported {len(data_set.inventory)} inventory items, "
        f"{len(data_set.issues)} issues, {len(data_set.employees)} employees, "
        f"and {len(data_set.categories)} categories."
    )


@system_group.command('stats')
@with_actor(CAN_VIEW)
def show_stats(actor):
    """Dashboard numbers and per-category stock."""
    try:
        data_set = storage_service.load_data_set()
    except StationaryError as e:
        click.echo(f"FAIL Stored data is invalid: {e}")
        return

    stats = reporting_service.dashboard_stats(data_set.inventory, data_set.issues, data_set.employees)
    click.echo("\n" + "="*60)
    for key, value in stats.items():
        click.echo(f"{key:<25} {value}")
    click.echo("="*60)

    breakdown = reporting_service.category_breakdown(data_set.inventory)
    if breakdown:
        click.echo(f"{'Category':<20} {'Items':<7} {'Stock':<8} {'Low':<5} {'Low %'}")
        for row in breakdown:
            click.echo(
                f"{row['category']:<20} {row['itemCount']:<7} {row['totalQuantity']:<8} "
                f"{row['lowStockCount']:<5} {row['lowStockPercentage']}%"
            )

    recent = reporting_service.recent_activity(data_set.issues)
    if recent:
        click.echo("\nRecent activity:")
        for issue in recent:
            click.echo(
                f"  {issue.issue_date.isoformat()}  {issue.employee_name:<22} "
                f"{issue.total_quantity:>4} unit(s)  {issue.status}"
            )
    click.echo("")


# =============================================================================
# ACCOUNT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """Account management commands."""


@users_group.command('create-admin')
@click.option('--employee-id', prompt=True, help='Login employee ID')
@click.option('--name', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin_cli(employee_id, name, password):
    """
    Create the first Admin account.

    Only allowed while no accounts exist; afterwards use `users create --as <admin>`.
    """
    if auth_service.has_users():
        click.echo("FAIL Accounts already exist. Use 'users create --as <admin>' instead.")
        return
    try:
        auth_service.create_user(ROLE_ADMIN, name, employee_id, password)
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
        return
    except StationaryError as e:
        click.echo(f"FAIL Failed to create admin: {e}")
        return
    click.echo(f"PASS Created admin: {employee_id} ({name})")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('create')
@click.option('--role', type=click.Choice(ROLES), prompt=True, help='Role')
@click.option('--name', prompt=True, help='Display name')
@click.option('--employee-id', 'new_employee_id', prompt=True, help='Login employee ID')
@click.option('--new-password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password for the new account')
@with_actor(CAN_MANAGE_USERS)
def create_user_cli(role, name, new_employee_id, new_password, actor):
    """Create an account."""
    try:
        auth_service.create_user(role, name, new_employee_id, new_password)
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
        return
    except StationaryError as e:
        click.echo(f"FAIL Failed to create user: {e}")
        return
    click.echo(f"PASS Created user: {new_employee_id} ({name}) with role '{role}'")


@users_group.command('update')
@click.argument('target_id')
@click.option('--role', type=click.Choice(ROLES), default=None, help='New role')
@click.option('--name', default=None, help='New display name')
@click.option('--reset-password', is_flag=True, help='Prompt for a new password')
@with_actor(CAN_MANAGE_USERS)
def update_user_cli(target_id, role, name, reset_password, actor):
    """Change an account's role, name or password."""
    new_password = None
    if reset_password:
        new_password = click.prompt('New password', hide_input=True, confirmation_prompt=True)
    try:
        account = auth_service.update_user(target_id, role=role, name=name, password=new_password)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Updated {account['employeeId']}: {account['name']} ({account['role']})")


@users_group.command('delete')
@click.argument('target_id')
@with_actor(CAN_MANAGE_USERS)
def delete_user_cli(target_id, actor):
    """Delete an account. The last Admin can not be deleted."""
    try:
        auth_service.delete_user(target_id)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Deleted user {target_id}")


@users_group.command('list')
@with_actor(CAN_MANAGE_USERS)
def list_users(actor):
    """List all accounts with their roles."""
    users = auth_service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'Employee ID':<15} {'Name':<30} {'Role'}")
    click.echo("="*70)
    for user in users:
        click.echo(f"{user['employeeId']:<15} {user['name']:<30} {user['role']}")
    click.echo("="*70 + "\n")


# =============================================================================
# INVENTORY COMMANDS
# =============================================================================

@click.group('items')
def items_group():
    """Inventory item commands."""


@items_group.command('list')
@click.option('--search', default='', help='Filter by name, category or id')
@click.option('--low-stock', is_flag=True, help='Only items at or below their threshold')
@with_actor(CAN_VIEW)
def list_items(search, low_stock, actor):
    """List inventory items."""
    try:
        inventory = storage_service.load_data_set().inventory
    except StationaryError as e:
        click.echo(f"FAIL Stored data is invalid: {e}")
        return

    items = catalog_service.search_items(inventory, search)
    if low_stock:
        items = inventory_service.low_stock(items)

    if not items:
        click.echo("No items found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<16} {'Name':<28} {'Category':<16} {'Stock':<8} {'Unit':<8} {'Threshold'}")
    click.echo("="*90)
    for item in items:
        flag = "  LOW" if item.is_low_stock else ""
        click.echo(
            f"{item.id:<16} {item.name:<28} {item.category:<16} "
            f"{item.stock_quantity:<8} {item.unit:<8} {item.threshold}{flag}"
        )
    click.echo("="*90 + "\n")


@items_group.command('add')
@click.option('--name', required=True, help='Item name')
@click.option('--category', required=True, help='Category (must exist)')
@click.option('--stock', 'stock_quantity', default='0', show_default=True, help='Units on hand')
@click.option('--unit', default='pcs', show_default=True, help='Unit of measure')
@click.option('--threshold', default='0', show_default=True, help='Low-stock threshold')
@with_actor(CAN_EDIT)
def add_item_cli(name, category, stock_quantity, unit, threshold, actor):
    """Add an inventory item."""
    try:
        item = desk_service.add_item(
            {
                "name": name,
                "category": category,
                "stockQuantity": stock_quantity,
                "unit": unit,
                "threshold": threshold,
            },
            actor=actor,
        )
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Added {item.name} (ID: {item.id}) with {item.stock_quantity} {item.unit}")


@items_group.command('update')
@click.argument('item_id')
@click.option('--name', default=None)
@click.option('--category', default=None)
@click.option('--stock', 'stock_quantity', default=None, help='Manual stock correction')
@click.option('--unit', default=None)
@click.option('--threshold', default=None)
@with_actor(CAN_EDIT)
def update_item_cli(item_id, name, category, stock_quantity, unit, threshold, actor):
    """Edit an inventory item."""
    changes = {
        key: value for key, value in (
            ("name", name),
            ("category", category),
            ("stockQuantity", stock_quantity),
            ("unit", unit),
            ("threshold", threshold),
        ) if value is not None
    }
    if not changes:
        click.echo("Nothing to update.")
        return
    try:
        item = desk_service.update_item(item_id, changes, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Updated {item.name} (ID: {item.id}): stock {item.stock_quantity} {item.unit}")


@items_group.command('delete')
@click.argument('item_id')
@with_actor(CAN_DELETE)
def delete_item_cli(item_id, actor):
    """Delete an inventory item. Past issues keep the item's name."""
    try:
        desk_service.delete_item(item_id, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Deleted item {item_id}")


# =============================================================================
# EMPLOYEE COMMANDS
# =============================================================================

@click.group('employees')
def employees_group():
    """Employee commands."""


@employees_group.command('list')
@with_actor(CAN_VIEW)
def list_employees(actor):
    try:
        employees = storage_service.load_data_set().employees
    except StationaryError as e:
        click.echo(f"FAIL Stored data is invalid: {e}")
        return

    if not employees:
        click.echo("No employees found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<15} {'Name':<30} {'Department'}")
    click.echo("="*70)
    for employee in employees:
        click.echo(f"{employee.id:<15} {employee.name:<30} {employee.department}")
    click.echo("="*70 + "\n")


@employees_group.command('add')
@click.option('--id', 'new_id', required=True, help='Employee ID (unique)')
@click.option('--name', required=True)
@click.option('--department', required=True)
@with_actor(CAN_EDIT)
def add_employee_cli(new_id, name, department, actor):
    try:
        employee = desk_service.add_employee(
            {"id": new_id, "name": name, "department": department}, actor=actor
        )
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Added employee {employee.name} ({employee.id}), {employee.department}")


@employees_group.command('update')
@click.argument('original_id')
@click.option('--id', 'new_id', default=None, help='New employee ID')
@click.option('--name', default=None)
@click.option('--department', default=None)
@with_actor(CAN_EDIT)
def update_employee_cli(original_id, new_id, name, department, actor):
    """Edit an employee. Past issues keep the name they were recorded with."""
    try:
        current = next((e for e in storage_service.load_data_set().employees if e.id == original_id), None)
        if current is None:
            click.echo(f"FAIL Employee {original_id!r} not found")
            return
        employee = desk_service.update_employee(
            original_id,
            {
                "id": new_id or current.id,
                "name": name or current.name,
                "department": department or current.department,
            },
            actor=actor,
        )
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Updated employee {employee.name} ({employee.id}), {employee.department}")


@employees_group.command('delete')
@click.argument('target_id')
@with_actor(CAN_DELETE)
def delete_employee_cli(target_id, actor):
    try:
        desk_service.delete_employee(target_id, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Deleted employee {target_id}")


# =============================================================================
# CATEGORY COMMANDS
# =============================================================================

@click.group('categories')
def categories_group():
    """Category commands."""


@categories_group.command('list')
@with_actor(CAN_VIEW)
def list_categories(actor):
    try:
        categories = storage_service.load_data_set().categories
    except StationaryError as e:
        click.echo(f"FAIL Stored data is invalid: {e}")
        return
    if not categories:
        click.echo("No categories found.")
        return
    for category in categories:
        click.echo(category)


@categories_group.command('add')
@click.argument('name')
@with_actor(CAN_EDIT)
def add_category_cli(name, actor):
    try:
        desk_service.add_category(name, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Added category '{name.strip()}'")


@categories_group.command('rename')
@click.argument('old_name')
@click.argument('new_name')
@with_actor(CAN_EDIT)
def rename_category_cli(old_name, new_name, actor):
    """Rename a category; items in it move to the new name."""
    try:
        desk_service.rename_category(old_name, new_name, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Renamed category '{old_name}' to '{new_name.strip()}'")


@categories_group.command('delete')
@click.argument('name')
@with_actor(CAN_DELETE)
def delete_category_cli(name, actor):
    """Delete a category. Refused while any item uses it."""
    try:
        desk_service.delete_category(name, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Deleted category '{name}'")


# =============================================================================
# ISSUE COMMANDS
# =============================================================================

@click.group('issues')
def issues_group():
    """Issue, signing and return commands."""


@issues_group.command('create')
@click.option('--employee', 'recipient_id', required=True, help='Employee receiving the items')
@click.option('--item', 'items', multiple=True, required=True, help='ITEM_ID:QUANTITY (repeatable)')
@with_actor(CAN_ISSUE)
def create_issue_cli(recipient_id, items, actor):
    """Create a pending issue. Stock is reserved immediately."""
    lines = [
        {"itemId": item_id, "quantity": quantity}
        for item_id, quantities in _parse_lines(items).items()
        for quantity in quantities
    ]
    try:
        result = desk_service.submit_issue({"employeeId": recipient_id, "items": lines}, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return

    issue = result.issue
    click.echo(f"PASS Created issue {issue.id} for {issue.employee_name} ({issue.department})")
    for line in issue.items:
        click.echo(f"     {line.quantity} x {line.item_name}")
    click.echo("     Status: pending (awaiting signature)")
    _echo_warnings(result.warnings)


@issues_group.command('sign')
@click.argument('issue_id')
@click.option('--signature', default=None, help='Signature data (e.g. a data URL)')
@click.option('--signature-file', type=click.Path(exists=True, dir_okay=False), default=None,
              help='File holding the signature data')
@with_actor(CAN_ISSUE)
def sign_issue_cli(issue_id, signature, signature_file, actor):
    """Record the employee's signature (pending -> issued)."""
    if signature_file:
        try:
            signature = Path(signature_file).read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise click.BadParameter("signature file must be UTF-8 text", param_hint="--signature-file")
    try:
        issue = desk_service.sign_issue(issue_id, signature, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f'PASS Successfully signed by {issue.employee_name}. Issue status updated to "Issued".')


@issues_group.command('status')
@click.argument('issue_id')
@click.argument('status', type=click.Choice(VALID_STATUSES))
@with_actor(CAN_EDIT)
def change_status_cli(issue_id, status, actor):
    """Move an issue between issued and returned."""
    try:
        result = desk_service.change_status(issue_id, status, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Issue {issue_id} is now {result.issue.status}")
    _echo_warnings(result.warnings)


@issues_group.command('return')
@click.argument('issue_id')
@click.option('--item', 'items', multiple=True, required=True, help='ITEM_ID:QUANTITY (repeatable)')
@with_actor(CAN_EDIT)
def return_items_cli(issue_id, items, actor):
    """Return part of an issued issue to stock."""
    quantities = {}
    for item_id, values in _parse_lines(items).items():
        if len(values) > 1:
            click.echo(f"FAIL Item {item_id} given more than once")
            return
        quantities[item_id] = values[0]
    try:
        result = desk_service.return_issue_items(issue_id, quantities, actor=actor)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return

    for line in result.issue.items:
        click.echo(f"     {line.item_name}: {line.returned}/{line.quantity} returned")
    click.echo(f"PASS Issue {issue_id} is now {result.issue.status}")
    _echo_warnings(result.warnings)


@issues_group.command('delete')
@click.argument('issue_ids', nargs=-1, required=True)
@click.option('--keep-stock', is_flag=True, help='Do not restore stock held by deleted issues')
@with_actor(CAN_DELETE)
def delete_issues_cli(issue_ids, keep_stock, actor):
    """Delete issues from history."""
    try:
        result = desk_service.remove_issues(issue_ids, actor=actor, restore_stock=not keep_stock)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Deleted issues; {len(result.issues)} remain")
    _echo_warnings(result.warnings)


@issues_group.command('clear')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@click.option('--keep-stock', is_flag=True, help='Do not restore stock held by deleted issues')
@with_actor(CAN_DELETE)
def clear_issues_cli(yes, keep_stock, actor):
    """Delete the entire issue history."""
    if not yes:
        click.confirm("WARN This will delete every issue. Are you sure?", abort=True)
    try:
        result = desk_service.clear_issue_history(actor=actor, restore_stock=not keep_stock)
    except StationaryError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo("PASS Issue history cleared")
    _echo_warnings(result.warnings)


def _print_issues(issues) -> None:
    click.echo("\n" + "="*110)
    click.echo(f"{'ID':<36} {'Employee':<22} {'Department':<16} {'Date':<11} {'Status':<9} {'Items'}")
    click.echo("="*110)
    for issue in issues:
        items = ", ".join(f"{line.quantity} x {line.item_name}" for line in issue.items)
        click.echo(
            f"{issue.id:<36} {issue.employee_name:<22} {issue.department:<16} "
            f"{issue.issue_date.isoformat():<11} {issue.status:<9} {items}"
        )
    click.echo("="*110 + "\n")


@issues_group.command('list')
@click.option('--status', type=click.Choice(VALID_STATUSES), default=None)
@click.option('--search', default='', help='Match id, employee, department, status or item name')
@click.option('--employee', 'recipient_id', default=None, help='Only issues for this employee ID')
@with_actor(CAN_VIEW)
def list_issues(status, search, recipient_id, actor):
    """List issues."""
    try:
        issues = storage_service.load_data_set().issues
    except StationaryError as e:
        click.echo(f"FAIL Stored data is invalid: {e}")
        return

    issues = reporting_service.search_issues(issues, search)
    if recipient_id:
        issues = issue_service.issues_for_employee(issues, recipient_id)
    if status:
        issues = [issue for issue in issues if issue.status == status]
    if not issues:
        click.echo("No issues found.")
        return
    _print_issues(issues)


@issues_group.command('pending')
@with_actor(CAN_VIEW)
def list_pending(actor):
    """Issues waiting for a signature."""
    try:
        issues = issue_service.pending_signatures(storage_service.load_data_set().issues)
    except StationaryError as e:
        click.echo(f"FAIL Stored data is invalid: {e}")
        return
    if not issues:
        click.echo("No issues are waiting for a signature.")
        return
    _print_issues(issues)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(items_group)
    app.cli.add_command(employees_group)
    app.cli.add_command(categories_group)
    app.cli.add_command(issues_group)
