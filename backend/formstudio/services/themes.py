"""
Theme Collection Service - saved custom themes.

Themes live in their own table and are never touched by document edits.
Saving is an upsert keyed by theme name; imports are validated completely
before anything is written.
"""
import json
from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from formstudio.builder.exceptions import PersistenceError
from formstudio.builder.engine import new_element_id
from formstudio.builder.schemas import CustomTheme
from formstudio.builder.themes import get_preset, parse_themes
from formstudio.core.logging import log_operation, theme_logger
from formstudio.db.models import Theme


def _new_theme_id() -> str:
    return f"custom-{new_element_id()}"


def _row_to_theme(row: Theme) -> Optional[CustomTheme]:
    try:
        theme = CustomTheme.model_validate(json.loads(row.payload))
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        theme_logger.warning("Skipping unreadable stored theme", theme_id=row.id, reason=str(e))
        return None
    return theme.model_copy(update={"id": row.id, "favorite": bool(row.is_favorite)})


class ThemeCollection:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self, operation: str):
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            theme_logger.error(f"Theme {operation} failed", error=e)
            raise PersistenceError(f"Theme {operation} failed: {e}") from e

    async def _find(self, **criteria) -> Optional[Theme]:
        query = select(Theme)
        for column, value in criteria.items():
            query = query.where(getattr(Theme, column) == value)
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read themes: {e}") from e
        return result.scalar_one_or_none()

    async def _upsert(self, theme: CustomTheme) -> CustomTheme:
        row = await self._find(name=theme.name)
        if row is None:
            stored = theme.model_copy(update={
                "id": theme.id or _new_theme_id(),
                "created": theme.created or datetime.now(timezone.utc).isoformat(),
            })
            if await self._find(id=stored.id) is not None:
                stored = stored.model_copy(update={"id": _new_theme_id()})
            row = Theme(id=stored.id, name=stored.name)
            self.db.add(row)
        else:
            previous = _row_to_theme(row)
            created = theme.created or (previous.created if previous else None)
            stored = theme.model_copy(update={"id": row.id, "created": created})

        row.category = stored.category
        row.is_favorite = stored.favorite
        row.payload = json.dumps(stored.model_dump(mode="json", by_alias=True))
        return stored

    @log_operation("themes.list", theme_logger)
    async def list_themes(self, favorites_only: bool = False) -> List[CustomTheme]:
        query = select(Theme).order_by(Theme.created_at, Theme.name)
        if favorites_only:
            query = query.where(Theme.is_favorite.is_(True))
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not list themes: {e}") from e
        themes = [_row_to_theme(row) for row in result.scalars().all()]
        return [theme for theme in themes if theme is not None]

    @log_operation("themes.save", theme_logger)
    async def save_theme(self, theme: CustomTheme) -> CustomTheme:
        stored = await self._upsert(theme)
        await self._commit("save")
        theme_logger.info("Theme saved", theme_id=stored.id, name=stored.name)
        return stored

    async def get_theme(self, theme_id: str) -> Optional[CustomTheme]:
        row = await self._find(id=theme_id)
        return _row_to_theme(row) if row is not None else None

    async def resolve(self, theme_id: str) -> Optional[CustomTheme]:
        """Look a theme up among the presets first, then the saved themes."""
        return get_preset(theme_id) or await self.get_theme(theme_id)

    @log_operation("themes.delete", theme_logger)
    async def delete_theme(self, theme_id: str) -> bool:
        row = await self._find(id=theme_id)
        if row is None:
            return False
        await self.db.delete(row)
        await self._commit("delete")
        return True

    async def set_favorite(self, theme_id: str, favorite: bool = True) -> Optional[CustomTheme]:
        row = await self._find(id=theme_id)
        if row is None:
            return None
        theme = _row_to_theme(row)
        if theme is None:
            return None
        theme = theme.model_copy(update={"favorite": favorite})
        row.is_favorite = favorite
        row.payload = json.dumps(theme.model_dump(mode="json", by_alias=True))
        await self._commit("favorite")
        return theme

    @log_operation("themes.import", theme_logger)
    async def import_themes(self, raw: Union[str, bytes]) -> List[CustomTheme]:
        """Import a theme file holding one theme or a list. Raises InvalidImportError."""
        themes = parse_themes(raw)
        stored = []
        try:
            for theme in themes:
                stored.append(await self._upsert(theme))
        except PersistenceError:
            await self.db.rollback()
            raise
        await self._commit("import")
        theme_logger.info("Themes imported", count=len(stored))
        return stored

