import pytest

from formstudio.builder import catalog
from formstudio.db.enums import ElementCategory, ElementType


@pytest.mark.parametrize("element_type", list(ElementType))
def test_default_element_skeleton_for_every_type(element_type):
    element = catalog.default_element(element_type)

    assert element.type == element_type
    assert element.label.startswith("New ")
    assert element.label[4].isupper() or not element.label[4].isalpha()
    assert element.placeholder == f"Enter {element_type.value}..."
    assert element.required is False
    assert element.field_styles == catalog.DEFAULT_FIELD_STYLES
    assert element.label_styles == catalog.DEFAULT_LABEL_STYLES
    if catalog.has_options(element_type):
        assert element.options == []
    else:
        assert element.options is None


def test_default_element_label_capitalises_first_letter():
    assert catalog.default_element(ElementType.email).label == "New Email"
    assert catalog.default_element(ElementType.multi_file_upload).label == "New Multi-file-upload"


def test_default_element_styles_are_not_shared():
    first = catalog.default_element(ElementType.text)
    second = catalog.default_element(ElementType.text)
    assert first.field_styles is not second.field_styles


def test_unknown_type_falls_back_to_generic_text_field():
    element = catalog.default_element("hologram", element_id="42")

    assert element.id == "42"
    assert element.type == ElementType.text
    assert element.label == "New Field"
    assert element.placeholder == "Enter value..."


def test_slider_skeleton_carries_range_defaults():
    element = catalog.default_element(ElementType.range_slider)
    assert (element.validation.min, element.validation.max, element.validation.step) == (0, 100, 1)


def test_validation_carried_only_where_rules_apply():
    assert catalog.default_element(ElementType.text).validation is not None
    assert catalog.default_element(ElementType.file_upload).validation is not None
    assert catalog.default_element(ElementType.h1).validation is None
    assert catalog.default_element(ElementType.select).validation is None


@pytest.mark.parametrize(
    "element_type, flag",
    [
        (ElementType.select, "hasOptions"),
        (ElementType.checkbox_tabs, "hasOptions"),
        (ElementType.email, "hasTextValidation"),
        (ElementType.number, "hasNumericValidation"),
        (ElementType.vertical_slider, "isSlider"),
        (ElementType.image_upload, "hasFileValidation"),
        (ElementType.multi_image_upload, "isMultiFile"),
        (ElementType.four_columns, "isLayout"),
        (ElementType.quote, "isContent"),
    ],
)
def test_capability_flags(element_type, flag):
    flags = catalog.capabilities(element_type)
    assert flags[flag] is True


def test_capabilities_accept_wire_tags():
    assert catalog.has_options("radio-group")
    assert catalog.is_layout("2-columns")
    assert not catalog.has_options("not-a-type")


def test_validation_fields():
    assert catalog.validation_fields(ElementType.text) == {"minLength", "maxLength", "pattern"}
    assert catalog.validation_fields(ElementType.slider) == {"min", "max", "step"}
    assert catalog.validation_fields(ElementType.file) == {"accept", "maxSize"}
    assert catalog.validation_fields(ElementType.multi_file_upload) == {"accept", "maxSize", "maxFiles"}
    assert catalog.validation_fields(ElementType.divider) == frozenset()


def test_palette_groups_every_type_once():
    groups = catalog.palette()
    flattened = [t for types in groups.values() for t in types]

    assert sorted(flattened) == sorted(ElementType)
    assert ElementType.container in groups[ElementCategory.layout]
    assert ElementType.h2 in groups[ElementCategory.content]
    assert ElementType.email in groups[ElementCategory.field]
