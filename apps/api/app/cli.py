"""CLI tools for portal administration."""

import click
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import SessionLocal
from app.services import flat_service, resident_service
from app.services.resident_service import ResidentNotFoundError, RoleMissingError


@click.group()
def cli():
    """Community portal CLI tools."""
    pass


@cli.command()
def seed_roles():
    """
    Create the RESIDENT, SECURITY, FACILITY_MANAGER, ADMIN and SUPERADMIN roles.

    Example:
        python -m app.cli seed-roles
    """
    db = SessionLocal()
    try:
        created = resident_service.ensure_roles(db)
    except SQLAlchemyError as e:
        db.rollback()
        raise click.ClickException(f"Database error: {e}")
    finally:
        db.close()

    if created:
        click.echo(f"✓ Created roles: {', '.join(created)}")
    else:
        click.echo("✓ All roles already exist")


@cli.command()
@click.argument("roster", type=click.File("r"))
def seed_flats(roster):
    """
    Load flats from a roster file with "BLOCK FLAT" lines.

    Existing flats are skipped, so the command can be re-run.

    Example:
        python -m app.cli seed-flats flats.csv
    """
    flats = flat_service.parse_roster(roster)
    if not flats:
        raise click.ClickException("No valid flats found in roster")

    db = SessionLocal()
    try:
        created = flat_service.seed_flats(db, flats)
    except SQLAlchemyError as e:
        db.rollback()
        raise click.ClickException(f"Database error: {e}")
    finally:
        db.close()

    click.echo(f"✓ Parsed {len(flats)} flats, created {created}")


@cli.command()
@click.option("--email", required=True, help="Email of an already registered resident")
def promote_superadmin(email: str):
    """
    Grant SUPERADMIN to a registered resident (bootstrap the first admin).

    Example:
        python -m app.cli promote-superadmin --email "someone@example.com"
    """
    db = SessionLocal()
    try:
        resident = resident_service.promote_superadmin(db, email)
        click.echo(f"✓ {resident.email} is now SUPERADMIN")
    except (ResidentNotFoundError, RoleMissingError) as e:
        raise click.ClickException(str(e))
    except SQLAlchemyError as e:
        db.rollback()
        raise click.ClickException(f"Database error: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
