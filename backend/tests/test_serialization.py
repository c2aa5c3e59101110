import json

import pytest

from formstudio.builder import engine
from formstudio.builder.exceptions import InvalidImportError
from formstudio.builder.schemas import FormDocument
from formstudio.builder.serialization import (
    export_filename, parse_document, serialize_document,
)
from formstudio.builder.session import EditorSession
from formstudio.db.enums import ElementType


def _sample_document():
    doc = FormDocument(name="Customer Survey", description="Quarterly check-in")
    doc = engine.add_element(doc, ElementType.text)
    doc = engine.add_element(doc, ElementType.select)
    text_id, select_id = (e.id for e in doc.elements)
    doc = engine.update_validation(doc, text_id, {"minLength": 2, "pattern": "^[A-Za-z ]+$"})
    doc = engine.add_element_option(doc, select_id, "Yes")
    doc = engine.update_element(doc, select_id, {"tooltip": "Pick one", "customFlag": True})
    doc = engine.update_settings_group(doc, "layout", "labelAlignment", "left")
    return engine.update_settings(doc, "redirectUrl", "https://example.com/thanks")


def test_document_round_trip():
    doc = _sample_document()
    assert parse_document(serialize_document(doc)) == doc


def test_serialized_document_uses_form_config_keys():
    payload = json.loads(serialize_document(_sample_document()))

    assert set(payload) == {"name", "description", "elements", "settings"}
    assert payload["elements"][0]["validation"]["minLength"] == 2
    assert "fieldStyles" in payload["elements"][0]
    assert payload["elements"][1]["customFlag"] is True
    assert payload["settings"]["layout"]["labelAlignment"] == "left"
    assert "canvasStyles" in payload["settings"]
    assert "customCSS" in payload["settings"]["canvasStyles"]


def test_parse_accepts_minimal_config():
    doc = parse_document('{"elements": [{"id": "1", "type": "email"}]}')

    assert doc.name == "Untitled Form"
    assert doc.elements[0].type == ElementType.email
    assert doc.settings.submit_button.text == "Submit Form"


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        "[1, 2, 3]",
        '{"elements": [{"id": "1", "type": "hologram"}]}',
        '{"elements": [{"id": "1", "type": "text"}, {"id": "1", "type": "email"}]}',
        '{"elements": [{"type": "text"}]}',
    ],
)
def test_parse_rejects_invalid_configs(raw):
    with pytest.raises(InvalidImportError):
        parse_document(raw)


def test_rejected_import_reports_field_errors():
    with pytest.raises(InvalidImportError) as exc_info:
        parse_document('{"elements": [{"id": "1", "type": "hologram"}]}')

    assert exc_info.value.errors
    assert exc_info.value.errors[0]["field"].startswith("elements.0.type")


def test_rejected_import_leaves_current_document_alone():
    current = _sample_document()
    before = serialize_document(current)
    with pytest.raises(InvalidImportError):
        current = parse_document("{broken")
    assert serialize_document(current) == before


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Customer Survey", "customer-survey-config.json"),
        ("  Ünïcode & Co!  ", "ncode--co-config.json"),
        ("***", "form-config.json"),
    ],
)
def test_export_filename(name, expected):
    assert export_filename(FormDocument(name=name)) == expected


def test_editor_session_tracks_selection():
    doc = engine.add_element(FormDocument(), ElementType.text)
    element_id = doc.elements[0].id

    session = EditorSession().select(element_id).open_dialog("preview")

    assert session.selected_element_id == element_id
    assert session.active_panel == "configuration"
    assert session.active_dialog == "preview"
    assert session.close_dialog().active_dialog is None
    assert session.reconcile(doc) is session
    assert session.reconcile(engine.delete_element(doc, element_id)).selected_element_id is None
    assert "selected_element_id" not in serialize_document(doc)
