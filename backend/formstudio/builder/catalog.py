"""
Element catalog.

Single source of truth for what each element type is able to do. Capability
flags are looked up from the type on every call rather than stored on the
element, so they stay correct after an element's type changes.
"""
from typing import Dict, FrozenSet, Optional, Union

from formstudio.builder.schemas import FormElement, ValidationRules
from formstudio.core.logging import editor_logger
from formstudio.db.enums import ElementCategory, ElementType

E = ElementType

OPTION_TYPES: FrozenSet[ElementType] = frozenset({
    E.select, E.multiselect,
    E.radio, E.radio_group, E.radio_blocks, E.radio_tabs,
    E.checkbox_group, E.checkbox_blocks, E.checkbox_tabs,
})

TEXT_VALIDATION_TYPES: FrozenSet[ElementType] = frozenset({
    E.text, E.email, E.password, E.textarea, E.phone, E.url,
})

NUMERIC_VALIDATION_TYPES: FrozenSet[ElementType] = frozenset({
    E.number, E.slider, E.range_slider, E.vertical_slider,
})

FILE_VALIDATION_TYPES: FrozenSet[ElementType] = frozenset({
    E.file, E.file_upload, E.multi_file_upload, E.image_upload, E.multi_image_upload,
})

MULTI_FILE_TYPES: FrozenSet[ElementType] = frozenset({
    E.multi_file_upload, E.multi_image_upload,
})

SLIDER_TYPES: FrozenSet[ElementType] = frozenset({
    E.slider, E.range_slider, E.vertical_slider,
})

LAYOUT_TYPES: FrozenSet[ElementType] = frozenset({
    E.container, E.two_columns, E.three_columns, E.four_columns,
    E.tabs, E.steps, E.grid, E.table, E.item_list, E.nested_list,
})

CONTENT_TYPES: FrozenSet[ElementType] = frozenset({
    E.h1, E.h2, E.h3, E.h4, E.p, E.paragraph, E.quote,
    E.image, E.gallery, E.link, E.divider, E.danger_button, E.static_html,
})

TEXT_RULES = frozenset({"minLength", "maxLength", "pattern"})
NUMERIC_RULES = frozenset({"min", "max", "step"})
FILE_RULES = frozenset({"accept", "maxSize"})

DEFAULT_FIELD_STYLES: Dict[str, str] = {
    "className": "w-full",
    "backgroundColor": "#ffffff",
    "borderColor": "#d1d5db",
    "borderRadius": "8px",
    "padding": "12px",
    "fontSize": "16px",
    "fontFamily": "Inter",
    "color": "#374151",
}

DEFAULT_LABEL_STYLES: Dict[str, str] = {
    "color": "#374151",
    "fontSize": "14px",
    "fontWeight": "500",
    "fontFamily": "Inter",
}

SLIDER_DEFAULT_RULES = {"min": 0, "max": 100, "step": 1}


def resolve_type(element_type: Union[ElementType, str, None]) -> Optional[ElementType]:
    """Return the ElementType for a tag, or None when the tag is unknown."""
    if isinstance(element_type, ElementType):
        return element_type
    try:
        return ElementType(element_type)
    except ValueError:
        return None


def has_options(element_type) -> bool:
    return resolve_type(element_type) in OPTION_TYPES


def has_text_validation(element_type) -> bool:
    return resolve_type(element_type) in TEXT_VALIDATION_TYPES


def has_numeric_validation(element_type) -> bool:
    return resolve_type(element_type) in NUMERIC_VALIDATION_TYPES


def has_file_validation(element_type) -> bool:
    return resolve_type(element_type) in FILE_VALIDATION_TYPES


def is_multi_file(element_type) -> bool:
    return resolve_type(element_type) in MULTI_FILE_TYPES


def is_slider(element_type) -> bool:
    return resolve_type(element_type) in SLIDER_TYPES


def is_layout(element_type) -> bool:
    return resolve_type(element_type) in LAYOUT_TYPES


def is_content(element_type) -> bool:
    return resolve_type(element_type) in CONTENT_TYPES


def category(element_type) -> ElementCategory:
    resolved = resolve_type(element_type)
    if resolved in LAYOUT_TYPES:
        return ElementCategory.layout
    if resolved in CONTENT_TYPES:
        return ElementCategory.content
    return ElementCategory.field


def validation_fields(element_type) -> FrozenSet[str]:
    """Validation rule names (wire spelling) that apply to a type."""
    fields = frozenset()
    if has_text_validation(element_type):
        fields |= TEXT_RULES
    if has_numeric_validation(element_type):
        fields |= NUMERIC_RULES
    if has_file_validation(element_type):
        fields |= FILE_RULES
        if is_multi_file(element_type):
            fields |= {"maxFiles"}
    return fields


def capabilities(element_type) -> Dict[str, bool]:
    """All capability flags for a type, keyed the way settings panels read them."""
    return {
        "hasOptions": has_options(element_type),
        "hasTextValidation": has_text_validation(element_type),
        "hasNumericValidation": has_numeric_validation(element_type),
        "hasFileValidation": has_file_validation(element_type),
        "isMultiFile": is_multi_file(element_type),
        "isSlider": is_slider(element_type),
        "isLayout": is_layout(element_type),
        "isContent": is_content(element_type),
    }


def display_name(element_type: ElementType) -> str:
    tag = element_type.value
    return tag[:1].upper() + tag[1:]


def default_element(element_type: Union[ElementType, str], element_id: str = "") -> FormElement:
    """
    Build the skeleton element a palette drop produces.

    Unknown tags fall back to a generic text field so a stale palette entry
    never breaks the canvas.
    """
    resolved = resolve_type(element_type)
    if resolved is None:
        editor_logger.warning("Unknown element type, using generic field", element_type=str(element_type))
        return FormElement(
            id=element_id,
            type=ElementType.text,
            label="New Field",
            placeholder="Enter value...",
            validation=ValidationRules(),
            field_styles=dict(DEFAULT_FIELD_STYLES),
            label_styles=dict(DEFAULT_LABEL_STYLES),
        )

    validation = None
    if is_slider(resolved):
        validation = ValidationRules(**SLIDER_DEFAULT_RULES)
    elif validation_fields(resolved):
        validation = ValidationRules()

    return FormElement(
        id=element_id,
        type=resolved,
        label=f"New {display_name(resolved)}",
        placeholder=f"Enter {resolved.value}...",
        required=False,
        options=[] if resolved in OPTION_TYPES else None,
        validation=validation,
        field_styles=dict(DEFAULT_FIELD_STYLES),
        label_styles=dict(DEFAULT_LABEL_STYLES),
    )


def palette() -> Dict[ElementCategory, list]:
    """Element types grouped for the element library, in enum order."""
    groups: Dict[ElementCategory, list] = {c: [] for c in ElementCategory}
    for element_type in ElementType:
        groups[category(element_type)].append(element_type)
    return groups
