# Overview: Authentication and permission decorators for CLI commands.

from functools import wraps

import click
from flask.cli import with_appcontext

from .errors import StationaryError
from .services import auth_service


def with_actor(permission: str):
    """
    Authenticate the operator and require a permission before running a command.

    Adds `--as EMPLOYEE_ID` and `--password` (prompted, hidden) options. On
    success the wrapped command receives the authenticated Actor as `actor`.
    On failure the command body never runs and the reason is printed.

    Usage:
        @issues_group.command('sign')
        @click.argument('issue_id')
        @with_actor(CAN_ISSUE)
        def sign_issue_cli(issue_id, actor):
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, employee_id, password, **kwargs):
            try:
                actor = auth_service.authenticate(employee_id, password)
                auth_service.require_permission(actor, permission)
            except StationaryError as e:
                click.echo(f"FAIL {e}")
                return None

            return f(*args, actor=actor, **kwargs)

        command = with_appcontext(decorated_function)
        command = click.option(
            '--password', prompt=True, hide_input=True, help='Password of the acting user'
        )(command)
        command = click.option(
            '--as', 'employee_id', required=True, help='Employee ID of the acting user'
        )(command)
        return command

    return decorator
