import json

import pytest

from formstudio.builder import engine, themes
from formstudio.builder.exceptions import InvalidImportError
from formstudio.builder.schemas import CustomTheme, FormDocument, ThemeColors, ThemeEffects
from formstudio.db.enums import ElementType


def _theme(**overrides):
    values = {
        "id": "custom-1",
        "name": "Night Shift",
        "category": "dark",
        "colors": ThemeColors(primary="#111111", secondary="#222222", background="#000000", text="#eeeeee"),
    }
    values.update(overrides)
    return CustomTheme(**values)


def test_theme_round_trip():
    theme = _theme(rating=4.5, popular=True, created="2024-01-01T00:00:00Z")
    assert themes.parse_theme(themes.serialize_theme(theme)) == theme


def test_serialized_theme_uses_camel_case():
    payload = json.loads(themes.serialize_theme(_theme()))

    assert "fontFamily" in payload["typography"]
    assert "borderRadius" in payload["layout"]
    assert "blurEffects" in payload["effects"]


@pytest.mark.parametrize("raw", ["{not json", "[]", "42", '{"category": "x"}', '{"name": "   "}'])
def test_parse_theme_rejects_bad_input(raw):
    with pytest.raises(InvalidImportError):
        themes.parse_theme(raw)


def test_parse_themes_accepts_object_or_list():
    one = themes.serialize_theme(_theme())
    many = json.dumps([json.loads(one), json.loads(themes.serialize_theme(_theme(name="Dawn")))])

    assert [t.name for t in themes.parse_themes(one)] == ["Night Shift"]
    assert [t.name for t in themes.parse_themes(many)] == ["Night Shift", "Dawn"]


def test_parse_themes_rejects_whole_bundle_when_one_entry_is_bad():
    bundle = json.dumps([json.loads(themes.serialize_theme(_theme())), {"name": ""}])
    with pytest.raises(InvalidImportError):
        themes.parse_themes(bundle)


def test_apply_theme_replaces_canvas_and_visual():
    doc = engine.add_element(FormDocument(), ElementType.text)
    theme = _theme()

    themed = themes.apply_theme(doc, theme)
    canvas = themed.settings.canvas_styles
    visual = themed.settings.visual

    assert canvas.background_color == "linear-gradient(135deg, #111111 0%, #222222 100%)"
    assert canvas.font_color == "#eeeeee"
    assert canvas.border_radius == "8px"
    assert canvas.padding == "24px"
    assert visual.theme_id == "custom-1"
    assert visual.theme_type == "dark"
    assert themed.elements == doc.elements
    assert themed.settings.layout == doc.settings.layout


def test_apply_theme_without_gradients_uses_background_color():
    themed = themes.apply_theme(FormDocument(), _theme(effects=ThemeEffects(gradients=False)))
    assert themed.settings.canvas_styles.background_color == "#000000"


def test_switching_themes_leaves_nothing_behind():
    doc = engine.update_settings_group(FormDocument(), "canvasStyles", "customCSS", ".x { color: red }")
    doc = engine.update_settings_group(doc, "canvasStyles", "glow", "soft")

    themed = themes.apply_theme(doc, themes.get_preset("ocean-breeze"))
    switched = themes.apply_theme(themed, _theme())

    dumped = switched.settings.canvas_styles.model_dump(by_alias=True)
    assert dumped["customCSS"] is None
    assert "glow" not in dumped
    assert switched.settings.canvas_styles == themes.apply_theme(FormDocument(), _theme()).settings.canvas_styles


def test_presets():
    ids = [t.id for t in themes.PRESET_THEMES]

    assert len(ids) == len(set(ids)) == 8
    assert themes.get_preset("dark-mode").effects.dark_mode is True
    assert themes.get_preset("missing") is None


def test_toggle_dark_mode():
    doc = FormDocument()

    dark = themes.toggle_dark_mode(doc, True)
    light = themes.toggle_dark_mode(dark, False)

    assert dark.settings.canvas_styles.form_background_color == "#374151"
    assert dark.settings.visual.dark_mode is True
    assert light.settings.canvas_styles.font_color == "#1a1a1a"
    assert light.settings.visual.dark_mode is False
    assert dark.settings.canvas_styles.font_family == doc.settings.canvas_styles.font_family
