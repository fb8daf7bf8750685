"""Public flat roster, used by the registration and guest RSVP forms."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.schemas.resident import FlatListResponse, FlatRead
from app.services import flat_service

router = APIRouter()


@router.get("", response_model=FlatListResponse)
def list_flats(
    block: int | None = Query(None, ge=1, le=4),
    db: Session = Depends(get_db),
):
    flats = flat_service.list_flats(db, block)
    return FlatListResponse(flats=[FlatRead.model_validate(f) for f in flats])
