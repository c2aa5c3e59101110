from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from formstudio.api.deps import get_theme_collection, http_error, read_import_body
from formstudio.builder.exceptions import FormBuilderError
from formstudio.builder.schemas import CustomTheme
from formstudio.builder.themes import PRESET_THEMES, serialize_theme
from formstudio.services.themes import ThemeCollection

router = APIRouter()


class FavoriteUpdate(BaseModel):
    favorite: bool = True


def _theme_to_dict(theme: CustomTheme) -> Dict[str, Any]:
    return theme.model_dump(mode="json", by_alias=True)


@router.get("")
async def list_themes(
    favorites_only: bool = False,
    themes: ThemeCollection = Depends(get_theme_collection),
) -> List[Dict[str, Any]]:
    try:
        saved = await themes.list_themes(favorites_only=favorites_only)
    except FormBuilderError as e:
        raise http_error(e)
    return [_theme_to_dict(t) for t in saved]


@router.get("/presets")
async def list_presets() -> List[Dict[str, Any]]:
    return [_theme_to_dict(t) for t in PRESET_THEMES]


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_theme(
    theme: CustomTheme,
    themes: ThemeCollection = Depends(get_theme_collection),
) -> Dict[str, Any]:
    """Save a custom theme. A theme with the same name is overwritten."""
    try:
        stored = await themes.save_theme(theme)
    except FormBuilderError as e:
        raise http_error(e)
    return _theme_to_dict(stored)


@router.post("/import", status_code=status.HTTP_201_CREATED)
async def import_themes(
    body: bytes = Depends(read_import_body),
    themes: ThemeCollection = Depends(get_theme_collection),
) -> List[Dict[str, Any]]:
    try:
        stored = await themes.import_themes(body)
    except FormBuilderError as e:
        raise http_error(e)
    return [_theme_to_dict(t) for t in stored]


@router.get("/{theme_id}/export")
async def export_theme(theme_id: str, themes: ThemeCollection = Depends(get_theme_collection)):
    try:
        theme = await themes.resolve(theme_id)
    except FormBuilderError as e:
        raise http_error(e)
    if theme is None:
        raise HTTPException(status_code=404, detail="Theme not found")
    return Response(
        content=serialize_theme(theme),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{theme.id}-theme.json"'},
    )


@router.post("/{theme_id}/favorite")
async def set_favorite(
    theme_id: str,
    payload: FavoriteUpdate = FavoriteUpdate(),
    themes: ThemeCollection = Depends(get_theme_collection),
) -> Dict[str, Any]:
    try:
        theme = await themes.set_favorite(theme_id, payload.favorite)
    except FormBuilderError as e:
        raise http_error(e)
    if theme is None:
        raise HTTPException(status_code=404, detail="Theme not found")
    return _theme_to_dict(theme)


@router.delete("/{theme_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_theme(theme_id: str, themes: ThemeCollection = Depends(get_theme_collection)):
    try:
        deleted = await themes.delete_theme(theme_id)
    except FormBuilderError as e:
        raise http_error(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Theme not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
