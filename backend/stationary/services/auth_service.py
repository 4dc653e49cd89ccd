# Overview: Service-layer operations for auth; accounts, password hashing and permission checks.

"""
Authentication Service

WHY: Every issue records who created it, so every state-changing command runs
as an authenticated Actor passed in explicitly. There is no ambient
"current user".

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters required
- Must contain uppercase, lowercase, digit, and special char
- Plaintext passwords are never stored or displayed
- There is no default account and no master password. The first admin is
  created with `flask users create-admin`.
- The last Admin account can not be deleted or demoted
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app

from ..errors import StationaryError
from ..permissions import ROLES, ROLE_ADMIN, get_role_permissions, role_has_permission
from ..records import Actor
from ..validation import MAX_ID_LENGTH, coerce_text
from .storage_service import STORAGE_KEYS, load_collection, save_collection


class PasswordValidationError(StationaryError):
    """Raised when password doesn't meet strength requirements."""
    pass


class AuthError(StationaryError):
    """Raised for failed logins and invalid account changes."""
    pass


class PermissionDeniedError(StationaryError):
    """Raised when an actor lacks the permission an operation needs."""

    def __init__(self, actor: Actor, flag: str):
        self.actor = actor
        self.flag = flag
        super().__init__(f"{actor.name} ({actor.role}) does not have permission: {flag}")


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with a fresh salt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in the accounts slot


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise. A malformed hash
    (for example a plaintext password carried over from an old export) never
    matches.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _load_accounts() -> list[dict]:
    return load_collection(STORAGE_KEYS["USERS"])


def _public(account: dict) -> dict:
    return {
        "role": account["role"],
        "name": account["name"],
        "employeeId": account["employeeId"],
        "permissions": get_role_permissions(account["role"]),
    }


def _validate_role(role: str) -> str:
    if role not in ROLES:
        raise AuthError(f"Invalid role '{role}'. Must be one of: {', '.join(ROLES)}")
    return role


def has_users() -> bool:
    return bool(_load_accounts())


def list_users() -> list[dict]:
    """All accounts without their password hashes."""
    return [_public(account) for account in _load_accounts()]


def create_user(role: str, name: str, employee_id: str, password: str) -> dict:
    """
    Register a new account.

    Raises:
        AuthError: If the role is invalid or the employee id is taken
        PasswordValidationError: If the password is too weak
    """
    _validate_role(role)
    name = coerce_text("name", name)
    employee_id = coerce_text("employeeId", employee_id, max_length=MAX_ID_LENGTH)

    accounts = _load_accounts()
    if any(account["employeeId"] == employee_id for account in accounts):
        raise AuthError(f"User with employee ID '{employee_id}' already exists")

    account = {
        "role": role,
        "name": name,
        "employeeId": employee_id,
        "passwordHash": hash_password(password),
    }
    save_collection(STORAGE_KEYS["USERS"], [*accounts, account])
    current_app.logger.info("Created %s account %s", role, employee_id)
    return _public(account)


def update_user(
    employee_id: str,
    *,
    role: str | None = None,
    name: str | None = None,
    password: str | None = None,
) -> dict:
    """Change role, name or password. Omitted fields are kept."""
    accounts = _load_accounts()
    index = next((i for i, a in enumerate(accounts) if a["employeeId"] == employee_id), None)
    if index is None:
        raise AuthError(f"User '{employee_id}' not found")

    account = dict(accounts[index])
    if role is not None:
        _validate_role(role)
        admins = [a for a in accounts if a["role"] == ROLE_ADMIN]
        if account["role"] == ROLE_ADMIN and role != ROLE_ADMIN and len(admins) == 1:
            raise AuthError("Cannot demote the last admin user")
        account["role"] = role
    if name is not None:
        account["name"] = coerce_text("name", name)
    if password:
        account["passwordHash"] = hash_password(password)

    accounts[index] = account
    save_collection(STORAGE_KEYS["USERS"], accounts)
    current_app.logger.info("Updated account %s", employee_id)
    return _public(account)


def delete_user(employee_id: str) -> None:
    """
    Remove an account.

    Raises:
        AuthError: If the account does not exist or is the last Admin
    """
    accounts = _load_accounts()
    target = next((a for a in accounts if a["employeeId"] == employee_id), None)
    if target is None:
        raise AuthError(f"User '{employee_id}' not found")

    admins = [a for a in accounts if a["role"] == ROLE_ADMIN]
    if target["role"] == ROLE_ADMIN and len(admins) == 1:
        raise AuthError("Cannot delete the last admin user")

    save_collection(STORAGE_KEYS["USERS"], [a for a in accounts if a["employeeId"] != employee_id])
    current_app.logger.info("Deleted account %s", employee_id)


def authenticate(employee_id: str, password: str) -> Actor:
    """
    Check credentials and return the Actor to pass into operations.

    Raises:
        AuthError: On unknown account or wrong password (same message for both)
    """
    for account in _load_accounts():
        if account["employeeId"] == employee_id:
            if verify_password(password, account.get("passwordHash", "")):
                return Actor(role=account["role"], name=account["name"], employee_id=employee_id)
            break

    current_app.logger.warning("Failed login for employee ID %s", employee_id)
    raise AuthError("Invalid employee ID or password")


def has_permission(actor: Actor | None, flag: str) -> bool:
    if actor is None:
        return False
    return role_has_permission(actor.role, flag)


def require_permission(actor: Actor | None, flag: str) -> None:
    """Raise PermissionDeniedError unless the actor's role grants `flag`."""
    if actor is None:
        raise AuthError("Authentication required")
    if not has_permission(actor, flag):
        current_app.logger.warning("Permission %s denied for %s", flag, actor.employee_id)
        raise PermissionDeniedError(actor, flag)
