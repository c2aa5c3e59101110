"""
Form document model.

Documents, elements and themes are immutable pydantic snapshots. They are
serialized with the camelCase keys of the FormConfig JSON shape
(``minLength``, ``fieldStyles``, ``canvasStyles``...) and accept either the
camelCase or the snake_case spelling on input.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from formstudio.db.enums import (
    ElementType, LabelAlignment, LayoutSize, PreviewMode, PublishState, ToggleMode,
)

Number = Union[int, float]


class DocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def wire_key(model_cls: type, key: str) -> str:
    """Map a snake_case field name onto the JSON key it is stored under."""
    field = model_cls.model_fields.get(key)
    if field is not None and field.alias:
        return field.alias
    return key


# ============================================================================
# Elements
# ============================================================================

class ValidationRules(DocumentModel):
    model_config = ConfigDict(extra="allow")

    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[Number] = None
    max: Optional[Number] = None
    pattern: Optional[str] = None
    accept: Optional[str] = None
    max_size: Optional[int] = None  # MB
    max_files: Optional[int] = None
    step: Optional[Number] = None


class Decorators(DocumentModel):
    required: Optional[bool] = None
    readonly: Optional[bool] = None
    disabled: Optional[bool] = None


class ElementLayout(DocumentModel):
    in_row: Optional[bool] = None
    row_position: Optional[int] = None
    row_id: Optional[str] = None


class FormElement(DocumentModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: ElementType
    label: str = ""
    required: bool = False
    placeholder: Optional[str] = None
    description: Optional[str] = None
    tooltip: Optional[str] = None
    name: Optional[str] = None
    value: Optional[str] = None
    options: Optional[List[str]] = None
    validation: Optional[ValidationRules] = None
    decorators: Optional[Decorators] = None
    field_styles: Optional[Dict[str, Any]] = None
    label_styles: Optional[Dict[str, Any]] = None
    layout: Optional[ElementLayout] = None
    container_id: Optional[str] = None

    @property
    def submission_key(self) -> str:
        return self.name or self.id


# ============================================================================
# Settings groups
# ============================================================================

class ColumnSettings(DocumentModel):
    default: bool = True
    tablet: bool = True
    desktop: bool = True


class LayoutSettings(DocumentModel):
    model_config = ConfigDict(extra="allow")

    size: LayoutSize = LayoutSize.default
    columns: ColumnSettings = Field(default_factory=ColumnSettings)
    labels: ToggleMode = ToggleMode.default
    placeholders: ToggleMode = ToggleMode.default
    errors: ToggleMode = ToggleMode.default
    messages: ToggleMode = ToggleMode.default
    label_alignment: LabelAlignment = LabelAlignment.top
    label_width: int = 230
    question_spacing: int = 24


class CanvasStyles(DocumentModel):
    model_config = ConfigDict(extra="allow")

    background_color: Optional[str] = "linear-gradient(135deg, #667eea 0%, #764ba2 100%)"
    background_image: Optional[str] = None
    form_background_color: Optional[str] = "#ffffff"
    font_color: Optional[str] = "#321f16"
    primary_color: Optional[str] = "#3b82f6"
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None
    font_family: Optional[str] = "Inter"
    font_size: Optional[Number] = 16
    font_weight: Optional[Number] = None
    line_height: Optional[Number] = None
    form_width: Optional[int] = 752
    border_radius: Optional[str] = "12px"
    padding: Optional[str] = "32px"
    margin: Optional[str] = None
    box_shadow: Optional[str] = None
    custom_css: Optional[str] = Field(default=None, alias="customCSS")


class VisualSettings(DocumentModel):
    model_config = ConfigDict(extra="allow")

    theme_type: Optional[str] = None
    theme_id: Optional[str] = None
    animations: bool = True
    shadows: bool = True
    gradients: bool = True
    blur_effects: bool = False
    dark_mode: bool = False


class PreviewSettings(DocumentModel):
    model_config = ConfigDict(extra="allow")

    width: Union[Literal["Full"], int] = "Full"
    nesting: bool = False
    mode: PreviewMode = PreviewMode.desktop
    show_grid: bool = False
    show_outlines: bool = False

    @field_validator("width", mode="before")
    @classmethod
    def _pixel_width(cls, value):
        # Width pickers send "640" as text
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return value


class ValidationSettings(DocumentModel):
    model_config = ConfigDict(extra="allow")

    live_validation: ToggleMode = ToggleMode.default


class SubmitButtonSettings(DocumentModel):
    model_config = ConfigDict(extra="allow")

    enabled: bool = True
    text: str = "Submit Form"
    position: str = "bottom"


class TermsAndConditions(DocumentModel):
    model_config = ConfigDict(extra="allow")

    enabled: bool = False
    required: bool = False
    text: str = "I accept the Terms & Conditions"


class FormSettings(DocumentModel):
    model_config = ConfigDict(extra="allow")

    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    canvas_styles: CanvasStyles = Field(default_factory=CanvasStyles)
    visual: VisualSettings = Field(default_factory=VisualSettings)
    preview: PreviewSettings = Field(default_factory=PreviewSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    submit_button: SubmitButtonSettings = Field(default_factory=SubmitButtonSettings)
    terms_and_conditions: TermsAndConditions = Field(default_factory=TermsAndConditions)
    success_message: Optional[str] = None
    redirect_url: Optional[str] = None


# Group names as they appear on the wire, mapped to FormSettings attributes.
SETTINGS_GROUPS: Dict[str, str] = {
    "layout": "layout",
    "canvasStyles": "canvas_styles",
    "visual": "visual",
    "preview": "preview",
    "validation": "validation",
    "submitButton": "submit_button",
    "termsAndConditions": "terms_and_conditions",
}


def settings_group_attr(group: str) -> Optional[str]:
    """Resolve a group name given in either spelling to its attribute name."""
    if group in SETTINGS_GROUPS:
        return SETTINGS_GROUPS[group]
    if group in SETTINGS_GROUPS.values():
        return group
    return None


# ============================================================================
# Document
# ============================================================================

class FormDocument(DocumentModel):
    name: str = "Untitled Form"
    description: Optional[str] = None
    elements: List[FormElement] = Field(default_factory=list)
    settings: FormSettings = Field(default_factory=FormSettings)

    @model_validator(mode="after")
    def _unique_element_ids(self):
        seen = set()
        for element in self.elements:
            if element.id in seen:
                raise ValueError(f"Duplicate element id: {element.id}")
            seen.add(element.id)
        return self

    def find(self, element_id: str) -> Optional[FormElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def index_of(self, element_id: str) -> int:
        for index, element in enumerate(self.elements):
            if element.id == element_id:
                return index
        return -1


# ============================================================================
# Themes
# ============================================================================

class ThemeColors(DocumentModel):
    primary: str = "#3b82f6"
    secondary: str = "#64748b"
    background: str = "#ffffff"
    form: str = "#ffffff"
    text: str = "#1a1a1a"
    accent: str = "#f59e0b"


class ThemeTypography(DocumentModel):
    font_family: str = "Inter"
    font_size: Number = 16
    font_weight: Number = 400
    line_height: Number = 1.5


class ThemeLayout(DocumentModel):
    border_radius: Number = 8
    padding: Number = 24
    spacing: Number = 16
    shadow: str = "0 4px 6px -1px rgb(0 0 0 / 0.1)"


class ThemeEffects(DocumentModel):
    animations: bool = True
    gradients: bool = True
    blur_effects: bool = False
    dark_mode: bool = False


class CustomTheme(DocumentModel):
    id: str = ""
    name: str
    category: str = "Modern"
    preview: Optional[str] = None
    colors: ThemeColors = Field(default_factory=ThemeColors)
    typography: ThemeTypography = Field(default_factory=ThemeTypography)
    layout: ThemeLayout = Field(default_factory=ThemeLayout)
    effects: ThemeEffects = Field(default_factory=ThemeEffects)
    created: Optional[str] = None
    rating: Optional[float] = None
    popular: Optional[bool] = None
    favorite: bool = False

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Theme name required")
        return value


# ============================================================================
# Persisted form (lifecycle attachment)
# ============================================================================

class PersistedForm(BaseModel):
    """A document plus the record fields the persistence layer assigns."""

    model_config = ConfigDict(frozen=True)

    primary_id: Optional[str] = None
    name: str = "Untitled Form"
    published: bool = False
    submissions: int = 0
    created_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    config: FormDocument = Field(default_factory=FormDocument)

    @property
    def state(self) -> PublishState:
        if not self.primary_id:
            return PublishState.draft
        if self.published:
            return PublishState.published
        return PublishState.saved
