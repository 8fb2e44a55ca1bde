# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# Run from backend/ with FLASK_APP=wsgi.py:
#
#   flask system init [--admin-username admin --admin-email admin@mams.local --admin-password "..."]
#       Create tables; create the first Admin only while the users table is empty.
#   flask system reset-db --yes
#       Drop and recreate every table. Local databases only.
#
#   flask users list [--role BaseCommander] [--all]
#   flask users create --username cmdr --email cmdr@mams.local --full-name "Base Commander" \
#                      --role BaseCommander --base Base-A
#       Missing options are prompted for; the password prompt is hidden.
#   flask users deactivate <username>
#       Deactivate and revoke every session.
#
#   flask sessions cleanup --days 30
#       Purge expired or revoked sessions older than the window.

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .models import User
from .models.auth import ROLE_ADMIN, ROLES
from .services import session_service
from .services.auth_service import MIN_PASSWORD_LENGTH, PasswordValidationError, create_user


PASSWORD_HINT = (
    f"Passwords need {MIN_PASSWORD_LENGTH}+ characters with upper and lower case, "
    "a digit and a special character"
)


def _report_create_failure(exc: ApiError) -> None:
    if isinstance(exc, PasswordValidationError):
        click.echo(f"FAIL Password validation failed: {exc.message}")
        click.echo(PASSWORD_HINT)
    else:
        click.echo(f"FAIL Failed to create user: {exc.message}")


@click.group('system')
def system_group():
    """Schema and first-run setup."""


@system_group.command('init')
@click.option('--admin-username', default='admin', show_default=True, help='Username of the first Admin')
@click.option('--admin-email', default='admin@mams.local', show_default=True, help='Email of the first Admin')
@click.option('--admin-password', default='Password123!', show_default=True, help='Password of the first Admin')
@with_appcontext
def init_system(admin_username, admin_email, admin_password):
    """
    Create tables and, on an empty users table, the first Admin.

    Change the default Admin password before exposing the API.
    """
    db.create_all()
    click.echo("PASS Tables ready")

    if db.session.query(User).count():
        click.echo("SKIP Users already exist; no Admin created")
        return

    try:
        user = create_user(
            username=admin_username,
            email=admin_email,
            password=admin_password,
            full_name="System Administrator",
            role=ROLE_ADMIN,
        )
    except ApiError as exc:
        _report_create_failure(exc)
        return

    click.echo(f"PASS Created Admin: {user.username} ({user.email})")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@with_appcontext
def reset_db(yes):
    """Drop and recreate every table. All data is lost."""
    if not yes:
        click.confirm("WARN Every asset, movement, user and log entry will be deleted. Continue?", abort=True)

    db.drop_all()
    db.create_all()
    click.echo("PASS Schema recreated; run 'flask system init' next")


@click.group('users')
def users_group():
    """Account inspection and bootstrap."""


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--full-name', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ROLES), prompt=True)
@click.option('--base', 'assigned_base', default=None, help='Assigned base (required for BaseCommander)')
@with_appcontext
def create_user_cli(username, email, full_name, password, role, assigned_base):
    """Create an account with any role."""
    try:
        user = create_user(
            username=username,
            email=email,
            password=password,
            full_name=full_name,
            role=role,
            assigned_base=assigned_base,
        )
    except ApiError as exc:
        _report_create_failure(exc)
        return

    base = f" at {user.assigned_base}" if user.assigned_base else ""
    click.echo(f"PASS Created user: {user.username} ({user.role}{base})")


@users_group.command('list')
@click.option('--role', type=click.Choice(ROLES), help='Only this role')
@click.option('--all', 'include_inactive', is_flag=True, help='Include deactivated accounts')
@with_appcontext
def list_users(role, include_inactive):
    query = db.session.query(User)
    if role:
        query = query.filter_by(role=role)
    if not include_inactive:
        query = query.filter_by(is_active=True)
    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    header = f"{'ID':<5} {'Username':<20} {'Role':<18} {'Base':<15} Active"
    click.echo(header)
    click.echo("-" * len(header))
    for user in users:
        click.echo(
            f"{user.id:<5} {user.username:<20} {user.role:<18} "
            f"{user.assigned_base or '-':<15} {'yes' if user.is_active else 'no'}"
        )


@users_group.command('deactivate')
@click.argument('username')
@with_appcontext
def deactivate_user_cli(username):
    """Deactivate USERNAME and revoke every session they hold."""
    user = db.session.query(User).filter_by(username=username).first()
    if user is None:
        click.echo(f"FAIL No user named '{username}'")
        return
    if not user.is_active:
        click.echo(f"SKIP '{username}' is already inactive")
        return

    user.is_active = False
    db.session.commit()
    revoked = session_service.revoke_all_user_sessions(user.id, reason="User account deactivated")

    click.echo(f"PASS Deactivated {username}; revoked {revoked} session(s)")


@click.group('sessions')
def sessions_group():
    """Session maintenance."""


@sessions_group.command('cleanup')
@click.option('--days', default=30, show_default=True, type=int, help='Retention window in days')
@with_appcontext
def cleanup_sessions(days):
    """Delete expired or revoked sessions older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(older_than_days=days)
    click.echo(f"PASS Deleted {deleted} session(s) older than {days} days")


def register_commands(app):
    for group in (system_group, users_group, sessions_group):
        app.cli.add_command(group)
