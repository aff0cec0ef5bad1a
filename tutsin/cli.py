"""CLI tools for Tutsin administration."""

import click

from tutsin.core.config import settings
from tutsin.storage import build_storage


def _storage():
    return build_storage(settings)


@click.group()
def cli():
    """Tutsin CLI tools."""
    pass


@cli.command()
def init_db():
    """
    Create all tables directly from the models.

    Intended for local SQLite setups; use `alembic upgrade head` for Postgres.
    """
    from tutsin.db.base import Base
    import tutsin.db.models  # noqa: F401
    from tutsin.db.session import engine

    Base.metadata.create_all(engine)
    click.echo(f"✓ Created tables on {engine.url.render_as_string(hide_password=True)}")


@cli.command()
@click.option("--email", default=None, help="Bootstrap admin email")
@click.option("--password", default=None, help="Bootstrap admin password")
@click.option("--sample", is_flag=True, help="Also load sample blog posts, metrics and projects")
def seed_admin(email: str | None, password: str | None, sample: bool):
    """
    Create the default roles and the bootstrap super admin.

    Example:
        tutsin seed-admin --email "owner@tutsindigital.com" --password "s3cret!"
    """
    from tutsin.storage.seed import (
        DEFAULT_ADMIN_EMAIL,
        DEFAULT_ADMIN_PASSWORD,
        seed_defaults,
        seed_sample_data,
    )

    storage = _storage()
    admin_email = (email or DEFAULT_ADMIN_EMAIL).strip().lower()
    seed_defaults(storage, admin_email, password or DEFAULT_ADMIN_PASSWORD)
    click.echo(f"✓ Default roles ready, super admin: {admin_email}")

    if sample:
        seed_sample_data(storage)
        click.echo("✓ Sample data loaded")


@cli.command()
@click.option("--email", required=True, help="Admin email address")
@click.option("--password", required=True, help="Initial password")
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--role", "role_name", default="admin", show_default=True, help="Role name")
def create_admin(email: str, password: str, first_name: str, last_name: str, role_name: str):
    """
    Create an admin account with an existing role.

    Example:
        tutsin create-admin --email "ops@tutsindigital.com" --password "s3cret!" \\
            --first-name Ops --last-name Team --role moderator
    """
    from pydantic import ValidationError

    from tutsin.schemas.admin import AdminCreate
    from tutsin.services import admin_service

    storage = _storage()
    role = storage.get_admin_role_by_name(role_name)
    if role is None:
        click.echo(f"❌ Role not found: {role_name}")
        raise SystemExit(1)

    try:
        data = AdminCreate(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            role_id=role.id,
        )
        admin = admin_service.create_admin(storage, data)
    except (ValidationError, ValueError) as e:
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)

    click.echo(f"✓ Created admin {admin.email}")
    click.echo(f"  ID: {admin.id}")
    click.echo(f"  Role: {role.name}")


@cli.command()
def sweep_sessions():
    """Delete expired client and admin sessions."""
    from tutsin.services.session_service import cleanup_all_expired_sessions

    clients, admins = cleanup_all_expired_sessions(_storage())
    click.echo(f"✓ Removed {clients} client and {admins} admin sessions")


@cli.command()
@click.option(
    "--days",
    type=click.IntRange(min=1),
    default=None,
    help="Keep this many days of raw page views (default: PAGE_VIEW_RETENTION_DAYS)",
)
def purge_page_views(days):
    """Delete raw page views older than the retention window."""
    from tutsin.services.analytics_service import purge_old_page_views

    retention = days or settings.PAGE_VIEW_RETENTION_DAYS
    removed = purge_old_page_views(_storage(), retention)
    click.echo(f"✓ Removed {removed} page views older than {retention} days")


if __name__ == "__main__":
    cli()
