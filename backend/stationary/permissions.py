"""
Role and Permission Definitions

WHY: The CLI checks one flag per command. Every flag and the role table that
grants it live here.

DESIGN PRINCIPLES:
- Three fixed roles, each mapped to a fixed set of flags
- Permissions are coarse (view, issue, edit, delete, manage users)
- Admin has all permissions
"""

# =============================================================================
# ROLES
# =============================================================================

ROLE_ADMIN = "Admin"
ROLE_ASSISTANT = "Admin Assistant"
ROLE_GUEST = "Guest"

ROLES = (ROLE_ADMIN, ROLE_ASSISTANT, ROLE_GUEST)


# =============================================================================
# PERMISSION FLAGS
# =============================================================================

CAN_VIEW = "canView"
CAN_ISSUE = "canIssue"
CAN_EDIT = "canEdit"
CAN_DELETE = "canDelete"
CAN_MANAGE_USERS = "canManageUsers"

PERMISSION_FLAGS = (CAN_VIEW, CAN_ISSUE, CAN_EDIT, CAN_DELETE, CAN_MANAGE_USERS)


# =============================================================================
# DEFAULT ROLE MAPPINGS
# =============================================================================

ROLE_PERMISSIONS = {
    # Admin: Everything, including user management and backups
    ROLE_ADMIN: {
        CAN_VIEW: True,
        CAN_ISSUE: True,
        CAN_EDIT: True,
        CAN_DELETE: True,
        CAN_MANAGE_USERS: True,
    },
    # Admin Assistant: Day-to-day stock and issue work, no user management
    ROLE_ASSISTANT: {
        CAN_VIEW: True,
        CAN_ISSUE: True,
        CAN_EDIT: True,
        CAN_DELETE: True,
        CAN_MANAGE_USERS: False,
    },
    # Guest: Can request and sign issues, nothing else
    ROLE_GUEST: {
        CAN_VIEW: True,
        CAN_ISSUE: True,
        CAN_EDIT: False,
        CAN_DELETE: False,
        CAN_MANAGE_USERS: False,
    },
}


def get_role_permissions(role: str) -> dict[str, bool]:
    """Flags for a role; unknown roles get nothing."""
    return dict(ROLE_PERMISSIONS.get(role, {flag: False for flag in PERMISSION_FLAGS}))


def role_has_permission(role: str, flag: str) -> bool:
    return ROLE_PERMISSIONS.get(role, {}).get(flag, False)
