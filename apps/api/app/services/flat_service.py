"""Flat roster - listing and seeding the flats that exist in the community."""

import logging
import re
from typing import Iterable

from sqlalchemy.orm import Session

from app.core.constants import BLOCKS
from app.db.models import Flat

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s,]+")


def list_flats(db: Session, block: int | None = None) -> list[Flat]:
    """All flats, optionally for one block, ordered by block then number."""
    query = db.query(Flat)
    if block in BLOCKS:
        query = query.filter(Flat.block == block)
    return query.order_by(Flat.block.asc(), Flat.flat_number.asc()).all()


def flat_exists(db: Session, block: int, flat_number: str) -> bool:
    return (
        db.query(Flat.id)
        .filter(Flat.block == block, Flat.flat_number == flat_number)
        .first()
        is not None
    )


def parse_roster(lines: Iterable[str]) -> list[tuple[int, str]]:
    """
    Parse roster lines of the form "BLOCK FLAT ...".

    The header line, blank lines, malformed lines and blocks outside 1-4 are
    skipped. Pairs are deduplicated in first-seen order.
    """
    seen: set[tuple[int, str]] = set()
    flats: list[tuple[int, str]] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.upper().startswith("BLOCK"):
            continue
        parts = _SEPARATORS.split(line)
        if len(parts) < 2:
            continue
        try:
            block = int(parts[0])
        except ValueError:
            continue
        flat_number = parts[1]
        if block not in BLOCKS or not flat_number:
            continue
        key = (block, flat_number)
        if key not in seen:
            seen.add(key)
            flats.append(key)
    return flats


def seed_flats(db: Session, flats: list[tuple[int, str]]) -> int:
    """Insert flats that are not in the table yet. Returns the number created."""
    existing = {(f.block, f.flat_number) for f in db.query(Flat).all()}
    created = 0
    for block, flat_number in flats:
        if (block, flat_number) in existing:
            continue
        db.add(Flat(block=block, flat_number=flat_number))
        existing.add((block, flat_number))
        created += 1
    db.commit()
    logger.info("Flats seeded", extra={"flats_created": created, "flats_parsed": len(flats)})
    return created
