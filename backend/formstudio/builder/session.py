from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from formstudio.builder.schemas import FormDocument

Panel = Literal["elements", "configuration", "designer"]


class EditorSession(BaseModel):
    """
    UI state of one editing session: which element is selected and which
    dialog or panel is open. Kept beside the document, never inside it.
    """

    model_config = ConfigDict(frozen=True)

    selected_element_id: Optional[str] = None
    active_dialog: Optional[str] = None
    active_panel: Panel = "elements"

    def select(self, element_id: str) -> "EditorSession":
        return self.model_copy(update={"selected_element_id": element_id, "active_panel": "configuration"})

    def clear_selection(self) -> "EditorSession":
        return self.model_copy(update={"selected_element_id": None})

    def open_dialog(self, dialog: str) -> "EditorSession":
        return self.model_copy(update={"active_dialog": dialog})

    def close_dialog(self) -> "EditorSession":
        return self.model_copy(update={"active_dialog": None})

    def show_panel(self, panel: Panel) -> "EditorSession":
        return self.model_copy(update={"active_panel": panel})

    def reconcile(self, doc: FormDocument) -> "EditorSession":
        """Drop a selection whose element no longer exists in doc."""
        if self.selected_element_id and doc.find(self.selected_element_id) is None:
            return self.clear_selection()
        return self
