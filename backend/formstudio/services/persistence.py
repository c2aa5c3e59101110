"""
SQL storage for forms.

Rows in the ``forms`` table hold the document as camelCase JSON text. Any
SQLAlchemy failure is rolled back, logged and re-raised as PersistenceError.
"""
import json
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from formstudio.builder.exceptions import FormNotFoundError, PersistenceError
from formstudio.builder.lifecycle import PersistenceGateway
from formstudio.builder.schemas import FormDocument, PersistedForm
from formstudio.builder.serialization import serialize_document
from formstudio.core.logging import log_operation, persistence_logger
from formstudio.db.models import Form, FormSubmission


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back without tzinfo
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def row_to_form(row: Form) -> PersistedForm:
    try:
        config = FormDocument.model_validate(json.loads(row.config))
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        persistence_logger.error("Stored form config is unreadable", error=e, form_id=row.primary_id)
        raise PersistenceError(f"Stored form {row.primary_id} is corrupt") from e
    return PersistedForm(
        primary_id=row.primary_id,
        name=row.name,
        published=bool(row.published),
        submissions=row.submissions or 0,
        created_at=_as_utc(row.created_at),
        last_modified=_as_utc(row.last_modified),
        config=config,
    )


class SqlAlchemyFormGateway(PersistenceGateway):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self, operation: str):
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"{operation} failed: {e}") from e

    async def _get_row(self, form_id: str) -> Optional[Form]:
        try:
            result = await self.db.execute(select(Form).where(Form.primary_id == form_id))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read form {form_id}: {e}") from e
        return result.scalar_one_or_none()

    @log_operation("forms.create", persistence_logger)
    async def create(self, form: PersistedForm) -> PersistedForm:
        now = datetime.now(timezone.utc)
        row = Form(
            name=form.name,
            config=serialize_document(form.config, indent=None),
            published=form.published,
            submissions=form.submissions,
            created_at=now,
            last_modified=form.last_modified or now,
        )
        self.db.add(row)
        await self._commit("create")
        await self.db.refresh(row)
        return row_to_form(row)

    @log_operation("forms.get", persistence_logger)
    async def get_by_id(self, form_id: str) -> Optional[PersistedForm]:
        row = await self._get_row(form_id)
        if row is None:
            return None
        return row_to_form(row)

    @log_operation("forms.update", persistence_logger)
    async def update(self, form_id: str, form: PersistedForm) -> PersistedForm:
        row = await self._get_row(form_id)
        if row is None:
            raise FormNotFoundError(form_id)

        row.name = form.name
        row.config = serialize_document(form.config, indent=None)
        row.published = form.published
        row.last_modified = form.last_modified or datetime.now(timezone.utc)
        await self._commit("update")
        await self.db.refresh(row)
        return row_to_form(row)

    @log_operation("forms.delete", persistence_logger)
    async def delete(self, form_id: str) -> None:
        row = await self._get_row(form_id)
        if row is None:
            raise FormNotFoundError(form_id)
        await self.db.execute(delete(FormSubmission).where(FormSubmission.form_id == form_id))
        await self.db.delete(row)
        await self._commit("delete")

    @log_operation("forms.list", persistence_logger)
    async def list_all(self) -> List[PersistedForm]:
        try:
            result = await self.db.execute(select(Form).order_by(Form.last_modified.desc()))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not list forms: {e}") from e
        return [row_to_form(row) for row in result.scalars().all()]
