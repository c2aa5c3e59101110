import uuid

import pytest

from formstudio.builder import engine
from formstudio.builder.exceptions import FormNotFoundError, FormNotSavedError, PersistenceError
from formstudio.builder.lifecycle import PersistenceGateway, PublishStateMachine, share_url
from formstudio.builder.schemas import FormDocument, PersistedForm
from formstudio.db.enums import ElementType, PublishState
from formstudio.services.persistence import SqlAlchemyFormGateway


class MemoryGateway(PersistenceGateway):
    def __init__(self):
        self.records = {}
        self.updates = 0

    async def create(self, form):
        stored = form.model_copy(update={"primary_id": uuid.uuid4().hex, "created_at": form.last_modified})
        self.records[stored.primary_id] = stored
        return stored

    async def get_by_id(self, form_id):
        return self.records.get(form_id)

    async def update(self, form_id, form):
        if form_id not in self.records:
            raise FormNotFoundError(form_id)
        self.updates += 1
        self.records[form_id] = form
        return form

    async def delete(self, form_id):
        self.records.pop(form_id, None)

    async def list_all(self):
        return list(self.records.values())


class BrokenGateway(MemoryGateway):
    async def create(self, form):
        raise ConnectionError("network unreachable")

    async def update(self, form_id, form):
        raise PersistenceError("write rejected")


def _draft():
    doc = engine.add_element(FormDocument(name="Signup"), ElementType.email)
    return PersistedForm(name=doc.name, config=doc)


def _relabel(form, label):
    element_id = form.config.elements[0].id
    config = engine.update_element(form.config, element_id, {"label": label})
    return form.model_copy(update={"config": config})


@pytest.mark.anyio
async def test_lifecycle_moves_forward_only():
    machine = PublishStateMachine(MemoryGateway())
    draft = _draft()
    assert draft.state == PublishState.draft

    saved = await machine.save(draft)
    assert saved.state == PublishState.saved
    assert saved.last_modified is not None

    published = await machine.publish(saved)
    assert published.state == PublishState.published

    edited = _relabel(published, "Work email")
    resaved = await machine.save(edited)
    stored = await machine.load(saved.primary_id)

    assert resaved.state == PublishState.published
    assert resaved.primary_id == saved.primary_id
    assert resaved.config.elements[0].label == "Work email"
    assert stored.published is True
    assert stored.config.elements[0].label == "Work email"


@pytest.mark.anyio
async def test_saving_stale_snapshot_keeps_form_published():
    gateway = MemoryGateway()
    machine = PublishStateMachine(gateway)
    saved = await machine.save(_draft())

    # edits made while the publish was in flight still carry published=False
    edited = _relabel(saved, "Work email")
    await machine.publish(saved)
    resaved = await machine.save(edited)
    stored = await gateway.get_by_id(saved.primary_id)

    assert resaved.published is True
    assert stored.published is True
    assert stored.config.elements[0].label == "Work email"


@pytest.mark.anyio
async def test_save_unknown_form_raises_not_found():
    machine = PublishStateMachine(MemoryGateway())
    ghost = _draft().model_copy(update={"primary_id": "ghost"})
    with pytest.raises(FormNotFoundError):
        await machine.save(ghost)


@pytest.mark.anyio
async def test_publish_before_save_raises():
    machine = PublishStateMachine(MemoryGateway())
    with pytest.raises(FormNotSavedError):
        await machine.publish(_draft())


@pytest.mark.anyio
async def test_publish_does_not_push_unsaved_edits():
    gateway = MemoryGateway()
    machine = PublishStateMachine(gateway)
    saved = await machine.save(_draft())

    edited = saved.model_copy(update={"config": engine.rename_document(saved.config, "Renamed")})
    published = await machine.publish(edited)
    stored = await gateway.get_by_id(saved.primary_id)

    assert published.config.name == "Renamed"
    assert stored.published is True
    assert stored.config.name == "Signup"


@pytest.mark.anyio
async def test_publish_twice_writes_once():
    gateway = MemoryGateway()
    machine = PublishStateMachine(gateway)
    saved = await machine.save(_draft())

    await machine.publish(saved)
    await machine.publish(saved)

    assert gateway.updates == 1


@pytest.mark.anyio
async def test_publish_missing_record_raises_not_found():
    machine = PublishStateMachine(MemoryGateway())
    ghost = _draft().model_copy(update={"primary_id": "ghost"})
    with pytest.raises(FormNotFoundError):
        await machine.publish(ghost)


@pytest.mark.anyio
async def test_gateway_failure_leaves_form_unchanged():
    machine = PublishStateMachine(BrokenGateway())
    draft = _draft()
    snapshot = draft.model_dump()

    with pytest.raises(PersistenceError):
        await machine.save(draft)
    with pytest.raises(PersistenceError):
        await machine.save(draft.model_copy(update={"primary_id": "abc"}))

    assert draft.model_dump() == snapshot
    assert draft.state == PublishState.draft


@pytest.mark.anyio
async def test_duplicate_copies_config_and_flag():
    machine = PublishStateMachine(MemoryGateway())
    saved = await machine.save(_draft())
    await machine.publish(saved)

    copy = await machine.duplicate(saved.primary_id)

    assert copy.primary_id != saved.primary_id
    assert copy.name == "Signup (Copy)"
    assert copy.published is True
    assert copy.config.elements == saved.config.elements


@pytest.mark.anyio
async def test_load_and_delete():
    machine = PublishStateMachine(MemoryGateway())
    saved = await machine.save(_draft())

    assert (await machine.load(saved.primary_id)).name == "Signup"
    await machine.delete(saved)
    with pytest.raises(FormNotFoundError):
        await machine.load(saved.primary_id)


def test_share_url():
    saved = _draft().model_copy(update={"primary_id": "abc123"})

    assert share_url(saved, "https://forms.example.com/") == "https://forms.example.com/form/abc123"
    assert share_url(_draft(), "https://forms.example.com") is None


# ============================================================================
# SQL gateway
# ============================================================================

@pytest.mark.anyio
async def test_sql_gateway_round_trip(test_session):
    machine = PublishStateMachine(SqlAlchemyFormGateway(test_session))
    draft = _draft()

    saved = await machine.save(draft)
    loaded = await machine.load(saved.primary_id)

    assert loaded.config == draft.config
    assert loaded.state == PublishState.saved
    assert loaded.created_at is not None


@pytest.mark.anyio
async def test_sql_gateway_publish_and_list(test_session):
    machine = PublishStateMachine(SqlAlchemyFormGateway(test_session))
    first = await machine.save(_draft())
    await machine.save(_draft())

    await machine.publish(first)
    forms = await machine.list_forms()

    assert len(forms) == 2
    assert {f.primary_id: f.published for f in forms}[first.primary_id] is True


@pytest.mark.anyio
async def test_sql_gateway_save_after_publish_keeps_flag(test_session):
    machine = PublishStateMachine(SqlAlchemyFormGateway(test_session))
    saved = await machine.save(_draft())
    await machine.publish(saved)

    await machine.save(_relabel(saved, "Work email"))
    stored = await machine.load(saved.primary_id)

    assert stored.published is True
    assert stored.config.elements[0].label == "Work email"


@pytest.mark.anyio
async def test_sql_gateway_update_unknown_form(test_session):
    gateway = SqlAlchemyFormGateway(test_session)
    with pytest.raises(FormNotFoundError):
        await gateway.update("missing", _draft())


@pytest.mark.anyio
async def test_sql_gateway_delete(test_session):
    gateway = SqlAlchemyFormGateway(test_session)
    machine = PublishStateMachine(gateway)
    saved = await machine.save(_draft())

    await machine.delete(saved)

    assert await gateway.get_by_id(saved.primary_id) is None
