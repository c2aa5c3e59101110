"""
Forms API

Provides:
- Saving, loading, listing and deleting form documents
- Publish and duplicate transitions
- Theme application, JSON export and import
- Public form definition fetch and submission intake
"""
import json
from typing import Any, Dict, List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from formstudio.api.deps import (
    get_state_machine,
    get_submission_service,
    get_theme_collection,
    http_error,
    read_import_body,
)
from formstudio.builder.exceptions import FormBuilderError
from formstudio.builder.lifecycle import PublishStateMachine, share_url
from formstudio.builder.schemas import FormDocument, PersistedForm
from formstudio.builder.serialization import (
    document_to_dict, export_filename, parse_document, serialize_document,
)
from formstudio.builder.themes import apply_theme
from formstudio.core.logging import api_logger
from formstudio.db.enums import PublishState
from formstudio.db.models import FormSubmission
from formstudio.services.submissions import SubmissionService
from formstudio.services.themes import ThemeCollection

router = APIRouter()


# ============================================================================
# Pydantic Schemas
# ============================================================================

class FormSaveRequest(BaseModel):
    config: FormDocument = Field(default_factory=FormDocument)


class FormResponse(BaseModel):
    primary_id: Optional[str]
    name: str
    published: bool
    submissions: int
    state: PublishState
    share_url: Optional[str]
    created_at: Optional[datetime]
    last_modified: Optional[datetime]
    config: Dict[str, Any]


class FormListResponse(BaseModel):
    primary_id: str
    name: str
    published: bool
    submissions: int
    state: PublishState
    element_count: int
    last_modified: Optional[datetime]


class PublicFormResponse(BaseModel):
    primary_id: str
    name: str
    config: Dict[str, Any]


class SubmissionCreate(BaseModel):
    data: Dict[str, Any] = Field(..., description="Values keyed by element name or id")


class SubmissionResponse(BaseModel):
    id: int
    form_id: str
    data: Dict[str, Any]
    submitted_at: Optional[datetime]


# ============================================================================
# Helper Functions
# ============================================================================

def _form_to_response(form: PersistedForm) -> FormResponse:
    return FormResponse(
        primary_id=form.primary_id,
        name=form.name,
        published=form.published,
        submissions=form.submissions,
        state=form.state,
        share_url=share_url(form),
        created_at=form.created_at,
        last_modified=form.last_modified,
        config=document_to_dict(form.config),
    )


def _submission_to_response(submission: FormSubmission) -> SubmissionResponse:
    return SubmissionResponse(
        id=submission.id,
        form_id=submission.form_id,
        data=json.loads(submission.data),
        submitted_at=submission.submitted_at,
    )


# ============================================================================
# Editor Endpoints
# ============================================================================

@router.get("", response_model=List[FormListResponse])
async def list_forms(machine: PublishStateMachine = Depends(get_state_machine)):
    try:
        forms = await machine.list_forms()
    except FormBuilderError as e:
        raise http_error(e)
    return [
        FormListResponse(
            primary_id=f.primary_id,
            name=f.name,
            published=f.published,
            submissions=f.submissions,
            state=f.state,
            element_count=len(f.config.elements),
            last_modified=f.last_modified,
        )
        for f in forms
    ]


@router.post("", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
async def create_form(
    payload: FormSaveRequest,
    machine: PublishStateMachine = Depends(get_state_machine),
):
    """Save a draft document as a new form."""
    try:
        saved = await machine.save(PersistedForm(name=payload.config.name, config=payload.config))
    except FormBuilderError as e:
        raise http_error(e)
    return _form_to_response(saved)


@router.post("/import", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
async def import_form(
    body: bytes = Depends(read_import_body),
    machine: PublishStateMachine = Depends(get_state_machine),
):
    """
    Import an exported form configuration as a new saved form.
    Nothing is stored when the file is rejected.
    """
    try:
        document = parse_document(body)
        saved = await machine.save(PersistedForm(name=document.name, config=document))
    except FormBuilderError as e:
        raise http_error(e)
    api_logger.info("Form imported", form_id=saved.primary_id, elements=len(document.elements))
    return _form_to_response(saved)


@router.get("/{form_id}", response_model=FormResponse)
async def get_form(form_id: str, machine: PublishStateMachine = Depends(get_state_machine)):
    try:
        form = await machine.load(form_id)
    except FormBuilderError as e:
        raise http_error(e)
    return _form_to_response(form)


@router.put("/{form_id}", response_model=FormResponse)
async def save_form(
    form_id: str,
    payload: FormSaveRequest,
    machine: PublishStateMachine = Depends(get_state_machine),
):
    """Overwrite a saved form's document. The published flag is kept."""
    try:
        stored = await machine.load(form_id)
        saved = await machine.save(stored.model_copy(update={"config": payload.config}))
    except FormBuilderError as e:
        raise http_error(e)
    return _form_to_response(saved)


@router.delete("/{form_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_form(form_id: str, machine: PublishStateMachine = Depends(get_state_machine)):
    try:
        form = await machine.load(form_id)
        await machine.delete(form)
    except FormBuilderError as e:
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{form_id}/publish", response_model=FormResponse)
async def publish_form(form_id: str, machine: PublishStateMachine = Depends(get_state_machine)):
    try:
        form = await machine.load(form_id)
        published = await machine.publish(form)
    except FormBuilderError as e:
        raise http_error(e)
    return _form_to_response(published)


@router.post("/{form_id}/duplicate", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_form(form_id: str, machine: PublishStateMachine = Depends(get_state_machine)):
    try:
        copy = await machine.duplicate(form_id)
    except FormBuilderError as e:
        raise http_error(e)
    return _form_to_response(copy)


@router.post("/{form_id}/theme/{theme_id}", response_model=FormResponse)
async def apply_form_theme(
    form_id: str,
    theme_id: str,
    machine: PublishStateMachine = Depends(get_state_machine),
    themes: ThemeCollection = Depends(get_theme_collection),
):
    try:
        form = await machine.load(form_id)
        theme = await themes.resolve(theme_id)
        if theme is None:
            raise HTTPException(status_code=404, detail="Theme not found")
        saved = await machine.save(form.model_copy(update={"config": apply_theme(form.config, theme)}))
    except FormBuilderError as e:
        raise http_error(e)
    return _form_to_response(saved)


@router.get("/{form_id}/export")
async def export_form(form_id: str, machine: PublishStateMachine = Depends(get_state_machine)):
    try:
        form = await machine.load(form_id)
    except FormBuilderError as e:
        raise http_error(e)
    return Response(
        content=serialize_document(form.config),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(form.config)}"'},
    )


@router.get("/{form_id}/submissions", response_model=List[SubmissionResponse])
async def list_form_submissions(
    form_id: str,
    service: SubmissionService = Depends(get_submission_service),
):
    try:
        submissions = await service.list_submissions(form_id)
    except FormBuilderError as e:
        raise http_error(e)
    return [_submission_to_response(s) for s in submissions]


# ============================================================================
# Public Endpoints
# ============================================================================

@router.get("/public/{form_id}", response_model=PublicFormResponse)
async def get_public_form(form_id: str, machine: PublishStateMachine = Depends(get_state_machine)):
    """Form definition for respondents. Unpublished forms are reported as missing."""
    try:
        form = await machine.load(form_id)
    except FormBuilderError as e:
        raise http_error(e)
    if not form.published:
        raise HTTPException(status_code=404, detail="Form not found")
    return PublicFormResponse(primary_id=form.primary_id, name=form.name, config=document_to_dict(form.config))


@router.post(
    "/public/{form_id}/submit",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_form(
    form_id: str,
    payload: SubmissionCreate,
    service: SubmissionService = Depends(get_submission_service),
):
    try:
        submission = await service.submit(form_id, payload.data)
    except FormBuilderError as e:
        raise http_error(e)
    return _submission_to_response(submission)
