"""
Theme application and theme file handling.

Applying a theme replaces the document's ``canvasStyles`` and ``visual``
groups outright, so nothing from a previously applied theme survives a
switch. Theme files are the camelCase JSON form of ``CustomTheme``.
"""
import json
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from formstudio.builder.exceptions import InvalidImportError
from formstudio.builder.schemas import (
    CanvasStyles, CustomTheme, FormDocument, ThemeColors, ThemeEffects, VisualSettings,
)
from formstudio.builder.serialization import error_summary

DEFAULT_CANVAS_MARGIN = "10px"

LIGHT_MODE = {
    "backgroundColor": "linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
    "formBackgroundColor": "#ffffff",
    "fontColor": "#1a1a1a",
}

DARK_MODE = {
    "backgroundColor": "linear-gradient(135deg, #1f2937 0%, #111827 100%)",
    "formBackgroundColor": "#374151",
    "fontColor": "#f9fafb",
}


def gradient(start: str, end: str) -> str:
    return f"linear-gradient(135deg, {start} 0%, {end} 100%)"


def theme_canvas_styles(theme: CustomTheme) -> CanvasStyles:
    colors = theme.colors
    background = gradient(colors.primary, colors.secondary) if theme.effects.gradients else colors.background
    return CanvasStyles(
        background_color=background,
        background_image="",
        form_background_color=colors.form,
        font_color=colors.text,
        primary_color=colors.primary,
        secondary_color=colors.secondary,
        accent_color=colors.accent,
        font_family=theme.typography.font_family,
        font_size=theme.typography.font_size,
        font_weight=theme.typography.font_weight,
        line_height=theme.typography.line_height,
        border_radius=f"{theme.layout.border_radius}px",
        padding=f"{theme.layout.padding}px",
        margin=DEFAULT_CANVAS_MARGIN,
        box_shadow=theme.layout.shadow,
    )


def theme_visual_settings(theme: CustomTheme) -> VisualSettings:
    effects = theme.effects
    return VisualSettings(
        theme_type=theme.category,
        theme_id=theme.id or None,
        animations=effects.animations,
        shadows=bool(theme.layout.shadow),
        gradients=effects.gradients,
        blur_effects=effects.blur_effects,
        dark_mode=effects.dark_mode,
    )


def apply_theme(doc: FormDocument, theme: CustomTheme) -> FormDocument:
    settings = doc.settings.model_copy(update={
        "canvas_styles": theme_canvas_styles(theme),
        "visual": theme_visual_settings(theme),
    })
    return doc.model_copy(update={"settings": settings})


def toggle_dark_mode(doc: FormDocument, enabled: bool) -> FormDocument:
    """Swap background, form and font colors between the dark and light palettes."""
    palette = DARK_MODE if enabled else LIGHT_MODE
    canvas = doc.settings.canvas_styles
    canvas = canvas.model_validate({**canvas.model_dump(by_alias=True), **palette})
    visual = doc.settings.visual.model_copy(update={"dark_mode": enabled})
    settings = doc.settings.model_copy(update={"canvas_styles": canvas, "visual": visual})
    return doc.model_copy(update={"settings": settings})


# ============================================================================
# Theme files
# ============================================================================

def serialize_theme(theme: CustomTheme, indent: int = 2) -> str:
    return json.dumps(theme.model_dump(mode="json", by_alias=True), indent=indent)


def _load_json(raw: Union[str, bytes]):
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        raise InvalidImportError(f"Invalid theme file: {e}") from e


def _validate_theme(payload) -> CustomTheme:
    if not isinstance(payload, dict):
        raise InvalidImportError("Theme must be a JSON object")
    try:
        return CustomTheme.model_validate(payload)
    except ValidationError as e:
        raise InvalidImportError("Theme does not match the expected shape", error_summary(e)) from e


def parse_theme(raw: Union[str, bytes]) -> CustomTheme:
    return _validate_theme(_load_json(raw))


def parse_themes(raw: Union[str, bytes]) -> List[CustomTheme]:
    """Parse a theme bundle holding one theme object or a list of them."""
    payload = _load_json(raw)
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list) or not payload:
        raise InvalidImportError("Theme bundle must be a theme object or a non-empty list of themes")
    return [_validate_theme(item) for item in payload]


# ============================================================================
# Presets
# ============================================================================

def _preset(theme_id: str, name: str, category: str, colors: dict, popular: bool = False) -> CustomTheme:
    return CustomTheme(
        id=theme_id,
        name=name,
        category=category,
        preview=gradient(colors["primary"], colors["secondary"]),
        colors=ThemeColors(**colors),
        effects=ThemeEffects(dark_mode=category == "dark"),
        popular=popular,
    )


PRESET_THEMES: List[CustomTheme] = [
    _preset("modern-minimal", "Modern Minimal", "minimal", {
        "primary": "#000000", "secondary": "#666666", "background": "#ffffff",
        "form": "#ffffff", "text": "#1a1a1a",
    }, popular=True),
    _preset("ocean-breeze", "Ocean Breeze", "gradient", {
        "primary": "#0ea5e9", "secondary": "#06b6d4", "background": gradient("#667eea", "#764ba2"),
        "form": "#ffffff", "text": "#1e40af",
    }, popular=True),
    _preset("sunset-glow", "Sunset Glow", "warm", {
        "primary": "#f59e0b", "secondary": "#dc2626", "background": gradient("#ff9a9e", "#fecfef"),
        "form": "#ffffff", "text": "#dc2626",
    }, popular=True),
    _preset("forest-calm", "Forest Calm", "nature", {
        "primary": "#10b981", "secondary": "#059669", "background": gradient("#a8edea", "#fed6e3"),
        "form": "#ffffff", "text": "#065f46",
    }),
    _preset("dark-mode", "Dark Professional", "dark", {
        "primary": "#3b82f6", "secondary": "#6366f1", "background": gradient("#1f2937", "#111827"),
        "form": "#374151", "text": "#f9fafb",
    }, popular=True),
    _preset("corporate-blue", "Corporate Blue", "professional", {
        "primary": "#2563eb", "secondary": "#1d4ed8", "background": gradient("#1e3a8a", "#3730a3"),
        "form": "#ffffff", "text": "#1e40af",
    }),
    _preset("purple-dreams", "Purple Dreams", "creative", {
        "primary": "#8b5cf6", "secondary": "#ec4899", "background": gradient("#8b5cf6", "#ec4899"),
        "form": "#ffffff", "text": "#7c3aed",
    }),
    _preset("emerald-fresh", "Emerald Fresh", "nature", {
        "primary": "#10b981", "secondary": "#34d399", "background": gradient("#10b981", "#34d399"),
        "form": "#ffffff", "text": "#065f46",
    }),
]

_PRESETS_BY_ID: Dict[str, CustomTheme] = {theme.id: theme for theme in PRESET_THEMES}


def get_preset(theme_id: str) -> Optional[CustomTheme]:
    return _PRESETS_BY_ID.get(theme_id)
