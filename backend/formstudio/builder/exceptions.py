from typing import Dict, Optional


class FormBuilderError(Exception):
    """Base class for errors the builder reports to its caller."""


class PersistenceError(FormBuilderError):
    """Save, load, publish or delete failed in the persistence layer."""


class FormNotFoundError(PersistenceError):
    def __init__(self, form_id: str):
        super().__init__(f"Form not found: {form_id}")
        self.form_id = form_id


class FormNotSavedError(FormBuilderError):
    """Publish was requested for a form that has never been saved."""


class FormNotPublishedError(FormBuilderError):
    def __init__(self, form_id: str):
        super().__init__(f"Form is not published: {form_id}")
        self.form_id = form_id


class InvalidImportError(FormBuilderError):
    """Imported form or theme JSON was rejected before touching any state."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class SubmissionValidationError(FormBuilderError):
    def __init__(self, errors: Dict[str, str]):
        super().__init__(f"{len(errors)} field(s) failed validation")
        self.errors = errors
