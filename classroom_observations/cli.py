"""CLI tools for classroom observations administration."""

import click
import pydantic

from classroom_observations.core.config import settings
from classroom_observations.core.exceptions import DuplicateEmail
from classroom_observations.db.session import build_engine, build_session_factory, init_db
from classroom_observations.schemas.auth import RegisterRequest
from classroom_observations.services import auth_service, reference_service
from classroom_observations.utils.validation import describe_validation_errors


def _session():
    return build_session_factory(build_engine(settings.DATABASE_URL))()


@click.group()
def cli():
    """Classroom observations CLI tools."""
    pass


@cli.command("init-db")
def init_db_command():
    """Create all database tables."""
    init_db(build_engine(settings.DATABASE_URL))
    click.echo("✅ Database tables created")


@cli.command()
def seed_reference_data():
    """
    Seed IDEA and behavior categories.

    Safe to run repeatedly: existing rows are left alone.
    """
    db = _session()
    try:
        result = reference_service.seed_reference_data(db)
        click.echo(
            f"✅ Seeded {result['idea_categories']} IDEA categories and "
            f"{result['behavior_categories']} behavior categories"
        )
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="Observer email address")
@click.option("--first-name", required=True, help="First name")
@click.option("--last-name", required=True, help="Last name")
@click.option("--district", required=True, help="School district")
@click.option("--title", default=None, help="Professional title, e.g. 'School Psychologist'")
@click.option("--license-number", default=None, help="Optional license number")
@click.password_option(help="Account password (prompted when omitted)")
def create_observer(
    email: str,
    first_name: str,
    last_name: str,
    district: str,
    title: str | None,
    license_number: str | None,
    password: str,
):
    """
    Create an observer account.

    Example:
        classroom-observations create-observer --email psych@district.org \\
            --first-name Jerry --last-name Turner --district "Unified"
    """
    try:
        data = RegisterRequest(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            district=district,
            title=title,
            license_number=license_number,
        )
    except pydantic.ValidationError as e:
        click.echo(f"❌ {describe_validation_errors(e.errors())}")
        raise SystemExit(1)

    db = _session()
    try:
        user = auth_service.create_user(db, data)
        click.echo(f"✅ Created observer {user.email} ({user.id})")
    except DuplicateEmail as e:
        click.echo(f"❌ {e.detail}")
        raise SystemExit(1)
    finally:
        db.close()


if __name__ == "__main__":
    cli()
