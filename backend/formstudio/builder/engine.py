"""
Canvas editing engine.

Every operation takes a document (or element) snapshot and returns a new one;
inputs are never modified. Operations that reference a missing element id or
an out-of-range index return their input unchanged, and malformed values are
corrected locally instead of raising.
"""
import math
import threading
import time
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from formstudio.builder import catalog
from formstudio.builder.schemas import (
    FormDocument, FormElement, ValidationRules,
    settings_group_attr, wire_key,
)
from formstudio.db.enums import ElementType

MERGED_STYLE_KEYS = frozenset({"fieldStyles", "labelStyles"})
INTEGER_RULES = frozenset({"minLength", "maxLength", "maxSize", "maxFiles"})
NUMBER_RULES = frozenset({"min", "max", "step"})
TEXT_RULES = frozenset({"pattern", "accept"})

_id_lock = threading.Lock()
_last_issued_id = 0


def new_element_id(existing: Iterable[str] = ()) -> str:
    """
    Issue an element id from a millisecond clock.

    Ids only move forward within the process, so an id freed by a deletion is
    never handed out again.
    """
    global _last_issued_id
    taken = set(existing)
    with _id_lock:
        candidate = max(time.time_ns() // 1_000_000, _last_issued_id + 1)
        while str(candidate) in taken:
            candidate += 1
        _last_issued_id = candidate
    return str(candidate)


def parse_numeric(value: Any, integer: bool = False) -> Optional[Union[int, float]]:
    """Parse a numeric form input; anything unparsable becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    if integer and isinstance(number, float):
        return int(number)
    return number


def _merge_model(model: BaseModel, patch: Mapping[str, Any], merged_keys=frozenset()) -> BaseModel:
    model_cls = type(model)
    data = model.model_dump(by_alias=True)
    for key, value in patch.items():
        key = wire_key(model_cls, key)
        if key in merged_keys and isinstance(value, Mapping):
            value = {**(data.get(key) or {}), **value}
        data[key] = value
    try:
        return model_cls.model_validate(data)
    except ValidationError:
        return model


def _replace_element(
    doc: FormDocument,
    element_id: str,
    change: Callable[[FormElement], FormElement],
) -> FormDocument:
    index = doc.index_of(element_id)
    if index < 0:
        return doc
    current = doc.elements[index]
    updated = change(current)
    if updated is current:
        return doc
    elements = list(doc.elements)
    elements[index] = updated
    return doc.model_copy(update={"elements": elements})


# ============================================================================
# Elements
# ============================================================================

def add_element(
    doc: FormDocument,
    element_type: Union[ElementType, str],
    position: Optional[int] = None,
) -> FormDocument:
    """Insert a catalog skeleton with a fresh id at position (append by default)."""
    element_id = new_element_id(element.id for element in doc.elements)
    element = catalog.default_element(element_type, element_id=element_id)
    elements = list(doc.elements)
    if position is None:
        elements.append(element)
    else:
        elements.insert(max(0, min(position, len(elements))), element)
    return doc.model_copy(update={"elements": elements})


def update_element(doc: FormDocument, element_id: str, patch: Mapping[str, Any]) -> FormDocument:
    """
    Shallow-merge patch into one element. ``fieldStyles`` and
    ``labelStyles`` are merged key by key; the id cannot be patched.
    """
    patch = {key: value for key, value in patch.items() if key != "id"}
    if not patch:
        return doc
    return _replace_element(
        doc, element_id,
        lambda element: _merge_model(element, patch, MERGED_STYLE_KEYS),
    )


def _coerce_rule(key: str, value: Any) -> Any:
    if key in INTEGER_RULES:
        return parse_numeric(value, integer=True)
    if key in NUMBER_RULES:
        return parse_numeric(value)
    if key in TEXT_RULES:
        if value is None:
            return None
        text = str(value)
        return text if text.strip() else None
    return value


def update_validation(doc: FormDocument, element_id: str, field_patch: Mapping[str, Any]) -> FormDocument:
    """Merge rule values into an element's validation, keeping unrelated rules."""
    def change(element: FormElement) -> FormElement:
        rules = element.validation.model_dump(by_alias=True) if element.validation else {}
        for key, value in field_patch.items():
            key = wire_key(ValidationRules, key)
            rules[key] = _coerce_rule(key, value)
        try:
            validation = ValidationRules.model_validate(rules)
        except ValidationError:
            return element
        return element.model_copy(update={"validation": validation})

    return _replace_element(doc, element_id, change)


def delete_element(doc: FormDocument, element_id: str) -> FormDocument:
    elements = [element for element in doc.elements if element.id != element_id]
    if len(elements) == len(doc.elements):
        return doc
    return doc.model_copy(update={"elements": elements})


def reorder_elements(doc: FormDocument, from_index: int, to_index: int) -> FormDocument:
    count = len(doc.elements)
    if not (0 <= from_index < count and 0 <= to_index < count) or from_index == to_index:
        return doc
    elements = list(doc.elements)
    elements.insert(to_index, elements.pop(from_index))
    return doc.model_copy(update={"elements": elements})


def duplicate_element(doc: FormDocument, element_id: str) -> FormDocument:
    """Append a copy of an element under a new id, labelled "<label> (Copy)"."""
    source = doc.find(element_id)
    if source is None:
        return doc
    copy = source.model_copy(
        update={
            "id": new_element_id(element.id for element in doc.elements),
            "label": f"{source.label} (Copy)",
        },
        deep=True,
    )
    return doc.model_copy(update={"elements": [*doc.elements, copy]})


# ============================================================================
# Option lists
# ============================================================================

def add_option(element: FormElement, text: str) -> FormElement:
    option = text.strip()
    if not option:
        return element
    return element.model_copy(update={"options": [*(element.options or []), option]})


def update_option(element: FormElement, index: int, text: str) -> FormElement:
    """Replace an option in place; blank text becomes the "Option N" label."""
    options = list(element.options or [])
    if not 0 <= index < len(options):
        return element
    options[index] = text if text.strip() else f"Option {index + 1}"
    return element.model_copy(update={"options": options})


def remove_option(element: FormElement, index: int) -> FormElement:
    # The element's value is left alone even if it named the removed option.
    options = list(element.options or [])
    if not 0 <= index < len(options):
        return element
    del options[index]
    return element.model_copy(update={"options": options})


def add_element_option(doc: FormDocument, element_id: str, text: str) -> FormDocument:
    return _replace_element(doc, element_id, lambda element: add_option(element, text))


def update_element_option(doc: FormDocument, element_id: str, index: int, text: str) -> FormDocument:
    return _replace_element(doc, element_id, lambda element: update_option(element, index, text))


def remove_element_option(doc: FormDocument, element_id: str, index: int) -> FormDocument:
    return _replace_element(doc, element_id, lambda element: remove_option(element, index))


# ============================================================================
# Settings
# ============================================================================

def update_settings_group(doc: FormDocument, group: str, key: str, value: Any) -> FormDocument:
    """Merge ``{key: value}`` into one settings group; siblings are untouched."""
    attr = settings_group_attr(group)
    if attr is None:
        return doc
    current = getattr(doc.settings, attr)
    merged = _merge_model(current, {key: value})
    if merged is current:
        return doc
    settings = doc.settings.model_copy(update={attr: merged})
    return doc.model_copy(update={"settings": settings})


def update_settings(doc: FormDocument, key: str, value: Any) -> FormDocument:
    """
    Set a top-level setting such as ``successMessage`` or ``redirectUrl``.
    Whole groups are only replaced through ``update_settings_group``.
    """
    if settings_group_attr(key) is not None:
        return doc
    merged = _merge_model(doc.settings, {key: value})
    if merged is doc.settings:
        return doc
    return doc.model_copy(update={"settings": merged})


def rename_document(doc: FormDocument, name: str) -> FormDocument:
    name = name.strip()
    if not name or name == doc.name:
        return doc
    return doc.model_copy(update={"name": name})
