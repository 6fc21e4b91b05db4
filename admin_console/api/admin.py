"""
Admin "view as user" endpoints

Both POST endpoints report every failure as ``400 {"error": message}``,
whatever its kind: bad body, missing credentials, domain rejection or a
store failure.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from typing import Optional
import structlog

from admin_console.core.database import get_session
from admin_console.core.dependencies import get_optional_caller_identity
from admin_console.core.errors import AppError
from admin_console.schemas.token import CallerIdentity
from admin_console.schemas.view_as import ViewAsSessionCreate, ViewAsSessionEnd, ViewAsSessionInfo
from admin_console.services import impersonation

logger = structlog.get_logger(__name__)
router = APIRouter()

STORE_FAILURE = "View-as session store is unavailable"


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


def _validation_message(exc: PydanticValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


async def _read_body(request: Request, schema):
    try:
        payload = await request.json()
    except ValueError:
        raise AppError("Invalid JSON body", status_code=400)
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise AppError(_validation_message(e), status_code=400)


@router.post("/create-view-as-session")
async def create_view_as_session(
    request: Request,
    identity: Optional[CallerIdentity] = Depends(get_optional_caller_identity),
    session: Session = Depends(get_session),
):
    """Start a time-boxed session letting a super-admin act as an account user"""
    try:
        body = await _read_body(request, ViewAsSessionCreate)
        created = impersonation.issue_view_as_session(session, identity, body.account_id, body.user_id)
    except AppError as e:
        logger.warning(f"View-as session creation rejected: {e.message}")
        return _bad_request(e.message)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"View-as session creation failed in the store: {e}")
        return _bad_request(STORE_FAILURE)

    return JSONResponse(status_code=200, content=created.model_dump(mode="json", by_alias=True))


@router.post("/end-view-as-session")
async def end_view_as_session(
    request: Request,
    identity: Optional[CallerIdentity] = Depends(get_optional_caller_identity),
    session: Session = Depends(get_session),
):
    """End a view-as session owned by the caller"""
    try:
        body = await _read_body(request, ViewAsSessionEnd)
        message = impersonation.end_view_as_session(session, identity, body.session_token)
    except AppError as e:
        logger.warning(f"View-as session end rejected: {e.message}")
        return _bad_request(e.message)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"View-as session end failed in the store: {e}")
        return _bad_request(STORE_FAILURE)

    return JSONResponse(status_code=200, content={"message": message})


@router.get("/view-as-session/{session_token}", response_model=Optional[ViewAsSessionInfo])
async def get_view_as_session(
    session_token: str,
    identity: Optional[CallerIdentity] = Depends(get_optional_caller_identity),
    session: Session = Depends(get_session),
):
    """Account and user behind a live session, or null"""
    return impersonation.resolve_view_as_session(session, identity, session_token)
