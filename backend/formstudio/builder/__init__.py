"""
Form builder core.
Document model, element catalog, editing engine, themes and publish lifecycle.
"""
from formstudio.builder.schemas import CustomTheme, FormDocument, FormElement, PersistedForm
from formstudio.builder.lifecycle import PersistenceGateway, PublishStateMachine, share_url
from formstudio.builder.session import EditorSession

__all__ = [
    "CustomTheme",
    "EditorSession",
    "FormDocument",
    "FormElement",
    "PersistedForm",
    "PersistenceGateway",
    "PublishStateMachine",
    "share_url",
]
