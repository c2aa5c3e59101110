"""
JSON export/import of form documents.

Imports are all-or-nothing: the text is parsed and validated completely
before a document is returned, so a rejected import never replaces the
document the caller already holds.
"""
import json
import re
from typing import Union

from pydantic import ValidationError

from formstudio.builder.exceptions import InvalidImportError
from formstudio.builder.schemas import FormDocument

DEFAULT_EXPORT_FILENAME = "form-config.json"


def document_to_dict(doc: FormDocument) -> dict:
    return doc.model_dump(mode="json", by_alias=True)


def serialize_document(doc: FormDocument, indent: int = 2) -> str:
    return json.dumps(document_to_dict(doc), indent=indent)


def parse_document(raw: Union[str, bytes, dict]) -> FormDocument:
    if isinstance(raw, dict):
        payload = raw
    else:
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise InvalidImportError(f"Invalid JSON file format: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidImportError("Form configuration must be a JSON object")

    try:
        return FormDocument.model_validate(payload)
    except ValidationError as e:
        raise InvalidImportError("Form configuration does not match the expected shape", error_summary(e)) from e


def error_summary(error: ValidationError) -> list:
    """JSON-safe view of a pydantic error list."""
    return [
        {
            "field": ".".join(str(loc) for loc in item.get("loc", ())),
            "message": item.get("msg", "Invalid value"),
            "type": item.get("type", "value_error"),
        }
        for item in error.errors()
    ]


def export_filename(doc: FormDocument) -> str:
    slug = re.sub(r"\s+", "-", doc.name.strip().lower())
    slug = re.sub(r"[^a-z0-9\-_]", "", slug)
    if not slug:
        return DEFAULT_EXPORT_FILENAME
    return f"{slug}-config.json"
