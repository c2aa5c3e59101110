"""
Publish lifecycle: draft -> saved -> published.

A form with no primary id is a draft. Saving assigns an id through the
persistence gateway; publishing flips the stored record's flag and leaves
its content alone. Every gateway failure reaches the caller as a
PersistenceError and the form passed in is never modified.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from formstudio.builder.exceptions import FormNotFoundError, FormNotSavedError, PersistenceError
from formstudio.builder.schemas import PersistedForm
from formstudio.core.config import settings
from formstudio.core.logging import persistence_logger


class PersistenceGateway(ABC):
    """Storage for PersistedForm records, keyed by primary id."""

    @abstractmethod
    async def create(self, form: PersistedForm) -> PersistedForm:
        """Store a new record and return it with its assigned primary id."""

    @abstractmethod
    async def get_by_id(self, form_id: str) -> Optional[PersistedForm]:
        ...

    @abstractmethod
    async def update(self, form_id: str, form: PersistedForm) -> PersistedForm:
        """Overwrite a record. Raises FormNotFoundError for an unknown id."""

    @abstractmethod
    async def delete(self, form_id: str) -> None:
        ...

    @abstractmethod
    async def list_all(self) -> List[PersistedForm]:
        ...


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PublishStateMachine:
    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def _call(self, operation: str, coro):
        try:
            return await coro
        except PersistenceError:
            raise
        except Exception as e:
            persistence_logger.error(f"{operation} failed in gateway", error=e)
            raise PersistenceError(f"{operation} failed: {e}") from e

    async def save(self, form: PersistedForm) -> PersistedForm:
        """Create the record for a draft, or overwrite an already saved one."""
        update = {"name": form.config.name, "last_modified": utcnow()}
        if form.primary_id:
            stored = await self._call("save", self.gateway.get_by_id(form.primary_id))
            if stored is None:
                raise FormNotFoundError(form.primary_id)
            # a stale snapshot must not unpublish the stored form
            update["published"] = stored.published or form.published
            record = form.model_copy(update=update)
            saved = await self._call("save", self.gateway.update(form.primary_id, record))
            persistence_logger.info("Form updated", form_id=saved.primary_id)
        else:
            record = form.model_copy(update=update)
            saved = await self._call("save", self.gateway.create(record))
            persistence_logger.info("Form created", form_id=saved.primary_id)
        return saved

    async def publish(self, form: PersistedForm) -> PersistedForm:
        if not form.primary_id:
            raise FormNotSavedError("Save the form before publishing it")

        stored = await self._call("publish", self.gateway.get_by_id(form.primary_id))
        if stored is None:
            raise FormNotFoundError(form.primary_id)
        if not stored.published:
            await self._call(
                "publish",
                self.gateway.update(form.primary_id, stored.model_copy(update={"published": True})),
            )
        persistence_logger.info("Form published", form_id=form.primary_id)
        return form.model_copy(update={"published": True})

    async def load(self, form_id: str) -> PersistedForm:
        form = await self._call("load", self.gateway.get_by_id(form_id))
        if form is None:
            raise FormNotFoundError(form_id)
        return form

    async def list_forms(self) -> List[PersistedForm]:
        return await self._call("list", self.gateway.list_all())

    async def delete(self, form: PersistedForm) -> None:
        if not form.primary_id:
            return
        await self._call("delete", self.gateway.delete(form.primary_id))
        persistence_logger.info("Form deleted", form_id=form.primary_id)

    async def duplicate(self, form_id: str) -> PersistedForm:
        source = await self.load(form_id)
        name = f"{source.name} (Copy)"
        copy = PersistedForm(
            name=name,
            published=source.published,
            last_modified=utcnow(),
            config=source.config.model_copy(update={"name": name}),
        )
        created = await self._call("duplicate", self.gateway.create(copy))
        persistence_logger.info("Form duplicated", source_id=form_id, form_id=created.primary_id)
        return created


def share_url(form: PersistedForm, origin: Optional[str] = None) -> Optional[str]:
    """Public link for a saved form; drafts have none."""
    if not form.primary_id:
        return None
    origin = (origin or settings.PUBLIC_ORIGIN).rstrip("/")
    return f"{origin}/form/{form.primary_id}"
