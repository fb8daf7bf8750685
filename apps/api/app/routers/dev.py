"""Development-only endpoints for local sign-in without Google."""

from fastapi import APIRouter, Depends, Header, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_db
from app.routers.auth import set_session_cookie
from app.schemas.auth import MeResponse
from app.services import auth_service

router = APIRouter()


def _verify_dev_secret(x_dev_secret: str = Header(...)):
    """Only requests carrying DEV_SECRET may use dev endpoints."""
    if x_dev_secret != settings.DEV_SECRET:
        raise HTTPException(status_code=403, detail="Invalid dev secret")


class LoginAsRequest(BaseModel):
    email: str
    name: str = ""


@router.post(
    "/login-as",
    response_model=MeResponse,
    dependencies=[Depends(_verify_dev_secret)],
)
def login_as(
    body: LoginAsRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """Set a session cookie for any email, registered or not."""
    token, me = auth_service.issue_session_token(db, body.email, body.name, None)
    set_session_cookie(response, token)
    return me
