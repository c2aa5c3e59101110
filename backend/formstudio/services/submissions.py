"""
Submission Service - accepts filled-in values for published forms.

Values are keyed by each element's submission key (its ``name`` when set,
otherwise its id) and checked against the element's own rules before the
payload is stored.
"""
import json
import re
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from formstudio.builder import catalog
from formstudio.builder.engine import parse_numeric
from formstudio.builder.exceptions import (
    FormNotFoundError, FormNotPublishedError, PersistenceError, SubmissionValidationError,
)
from formstudio.builder.schemas import FormDocument, FormElement
from formstudio.core.logging import log_operation, submission_logger
from formstudio.db.enums import ElementType
from formstudio.db.models import Form, FormSubmission
from formstudio.services.persistence import row_to_form

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NON_INPUT_TYPES = frozenset({ElementType.form_submit, ElementType.captcha})


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def _collects_input(element: FormElement) -> bool:
    if element.type in NON_INPUT_TYPES:
        return False
    return not (catalog.is_layout(element.type) or catalog.is_content(element.type))


def _check_element(element: FormElement, value: Any) -> str:
    """Return the first rule the value breaks, or an empty string."""
    rules = element.validation

    if catalog.has_options(element.type) and element.options:
        chosen = value if isinstance(value, list) else [value]
        if any(item not in element.options for item in chosen):
            return "Select one of the available options"

    if element.type == ElementType.email and isinstance(value, str) and not EMAIL_PATTERN.match(value):
        return "Please enter a valid email address"

    if rules is None:
        return ""

    if catalog.has_text_validation(element.type) and isinstance(value, str):
        if rules.min_length is not None and len(value) < rules.min_length:
            return f"Must be at least {rules.min_length} characters"
        if rules.max_length is not None and len(value) > rules.max_length:
            return f"Must be at most {rules.max_length} characters"
        if rules.pattern:
            try:
                matched = re.fullmatch(rules.pattern, value)
            except re.error:
                submission_logger.warning("Ignoring invalid pattern", element_id=element.id, pattern=rules.pattern)
                matched = True
            if not matched:
                return "Value does not match the required format"

    if catalog.has_numeric_validation(element.type):
        number = parse_numeric(value)
        if number is None:
            return "Must be a number"
        if rules.min is not None and number < rules.min:
            return f"Must be at least {rules.min}"
        if rules.max is not None and number > rules.max:
            return f"Must be at most {rules.max}"

    return ""


class SubmissionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def validate(document: FormDocument, data: Dict[str, Any]) -> Dict[str, str]:
        """Map of submission key -> message for every element that fails."""
        errors: Dict[str, str] = {}
        for element in document.elements:
            if not _collects_input(element):
                continue
            key = element.submission_key
            value = data.get(key)
            if _is_empty(value):
                if element.required:
                    errors[key] = f"{element.label or key} is required"
                continue
            message = _check_element(element, value)
            if message:
                errors[key] = message
        return errors

    async def _get_form(self, form_id: str) -> Form:
        try:
            result = await self.db.execute(select(Form).where(Form.primary_id == form_id))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read form {form_id}: {e}") from e
        form = result.scalar_one_or_none()
        if form is None:
            raise FormNotFoundError(form_id)
        return form

    @log_operation("submissions.submit", submission_logger)
    async def submit(self, form_id: str, data: Dict[str, Any]) -> FormSubmission:
        form = await self._get_form(form_id)
        if not form.published:
            raise FormNotPublishedError(form_id)

        log = submission_logger.bind(form_id=form_id)
        errors = self.validate(row_to_form(form).config, data)
        if errors:
            log.info("Submission rejected", fields=sorted(errors))
            raise SubmissionValidationError(errors)

        submission = FormSubmission(form_id=form_id, data=json.dumps(data))
        self.db.add(submission)
        form.submissions = (form.submissions or 0) + 1
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Could not store submission: {e}") from e
        await self.db.refresh(submission)

        log.info("Submission accepted", submission_id=submission.id)
        return submission

    async def list_submissions(self, form_id: str) -> List[FormSubmission]:
        await self._get_form(form_id)
        try:
            result = await self.db.execute(
                select(FormSubmission)
                .where(FormSubmission.form_id == form_id)
                .order_by(FormSubmission.submitted_at.desc(), FormSubmission.id.desc())
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not list submissions: {e}") from e
        return list(result.scalars().all())
