"""Tests for the admin CLI."""
from click.testing import CliRunner

from app.cli import cli
from app.db.enums import Role
from app.db.models import Flat


def test_seed_roles_is_idempotent(db):
    result = CliRunner().invoke(cli, ["seed-roles"])
    assert result.exit_code == 0
    assert "All roles already exist" in result.output


def test_seed_flats_from_roster(db, tmp_path):
    roster = tmp_path / "flats.csv"
    roster.write_text("BLOCK FLAT\n1 101\n1 103\n4 401\n7 701\n")

    result = CliRunner().invoke(cli, ["seed-flats", str(roster)])
    assert result.exit_code == 0, result.output
    assert "Parsed 3 flats, created 2" in result.output
    assert db.query(Flat).filter(Flat.block == 4).count() == 1


def test_seed_flats_rejects_empty_roster(db, tmp_path):
    roster = tmp_path / "empty.csv"
    roster.write_text("BLOCK FLAT\n\n")

    result = CliRunner().invoke(cli, ["seed-flats", str(roster)])
    assert result.exit_code != 0
    assert "No valid flats found in roster" in result.output


def test_promote_superadmin(db, make_resident):
    resident = make_resident(approved=False, email="first.admin@example.com")

    result = CliRunner().invoke(cli, ["promote-superadmin", "--email", "First.Admin@example.com"])
    assert result.exit_code == 0, result.output

    db.expire_all()
    db.refresh(resident)
    assert resident.role.name == Role.SUPERADMIN.value
    assert resident.is_approved is True


def test_promote_unknown_resident(db):
    result = CliRunner().invoke(cli, ["promote-superadmin", "--email", "nobody@example.com"])
    assert result.exit_code != 0
    assert "Resident not found" in result.output
