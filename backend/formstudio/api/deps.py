from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from formstudio.builder.exceptions import (
    FormBuilderError,
    FormNotFoundError,
    FormNotPublishedError,
    FormNotSavedError,
    InvalidImportError,
    PersistenceError,
    SubmissionValidationError,
)
from formstudio.builder.lifecycle import PublishStateMachine
from formstudio.core.config import settings
from formstudio.db.database import get_db
from formstudio.services.persistence import SqlAlchemyFormGateway
from formstudio.services.submissions import SubmissionService
from formstudio.services.themes import ThemeCollection


async def get_state_machine(db: AsyncSession = Depends(get_db)) -> PublishStateMachine:
    return PublishStateMachine(SqlAlchemyFormGateway(db))


async def get_theme_collection(db: AsyncSession = Depends(get_db)) -> ThemeCollection:
    return ThemeCollection(db)


async def get_submission_service(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


async def read_import_body(request: Request) -> bytes:
    """
    Raw JSON body of an import request, capped at MAX_IMPORT_BYTES.
    Reading stops as soon as the cap is passed.
    """
    too_large = HTTPException(status_code=413, detail="Import file is too large")
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > settings.MAX_IMPORT_BYTES:
        raise too_large

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > settings.MAX_IMPORT_BYTES:
            raise too_large
    body = bytes(body)
    if not body.strip():
        raise HTTPException(status_code=400, detail="Import file is empty")
    return body


def http_error(error: FormBuilderError) -> HTTPException:
    """Translate a builder error into the HTTPException a route raises."""
    if isinstance(error, FormNotFoundError):
        return HTTPException(status_code=404, detail="Form not found")
    if isinstance(error, InvalidImportError):
        return HTTPException(status_code=400, detail={"message": str(error), "errors": error.errors})
    if isinstance(error, (FormNotSavedError, FormNotPublishedError)):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, SubmissionValidationError):
        return HTTPException(status_code=422, detail={"message": str(error), "errors": error.errors})
    if isinstance(error, PersistenceError):
        return HTTPException(status_code=503, detail="Storage is unavailable, please retry")
    return HTTPException(status_code=400, detail=str(error))
