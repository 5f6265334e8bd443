"""
Tests de planes de entrenamiento, mensajes y notificaciones.
"""
from datetime import date

import pytest
from sqlalchemy import select

from conftest import create_user, link_client, session_user
from fitdash.application.dto.message_dto import MessageCreateDTO
from fitdash.application.dto.plan_dto import PlanCreateDTO, PlanUpdateDTO
from fitdash.application.use_cases.message_use_cases import MessageUseCases, NotificationUseCases
from fitdash.application.use_cases.plan_use_cases import PlanUseCases
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.database.models import AuditLogModel, NotificationModel
from fitdash.shared.constants.roles import Role
from fitdash.shared.exceptions.auth import ForbiddenException
from fitdash.shared.exceptions.domain import EntityNotFoundException, ValidationException


ADMIN = SessionUser(id="admin-1", role=Role.ADMIN, name="Admin")


@pytest.fixture
async def people(db_session):
    trainer = await create_user(db_session, "rita@fit.pt", role="TRAINER", name="Rita")
    rival = await create_user(db_session, "joao@fit.pt", role="TRAINER", name="João")
    client = await create_user(db_session, "ana@fit.pt", role="CLIENT", name="Ana")
    other = await create_user(db_session, "bruno@fit.pt", role="CLIENT", name="Bruno")
    await link_client(db_session, trainer.id, client.id)
    return session_user(trainer), session_user(rival), session_user(client), session_user(other)


# --- planes ---------------------------------------------------------------

@pytest.mark.asyncio
async def test_trainer_creates_plan_for_linked_client(db_session, people):
    trainer, _, client, _ = people

    plan = await PlanUseCases(db_session).create_plan(
        trainer,
        PlanCreateDTO(title=" Fuerza 8 semanas ", client_id=client.id, trainer_id="ignored",
                      content={"days": [{"name": "Piernas"}]}),
    )

    assert plan.title == "Fuerza 8 semanas"
    assert plan.trainer_id == trainer.id
    assert plan.status == "DRAFT"
    assert plan.content == {"days": [{"name": "Piernas"}]}


@pytest.mark.asyncio
async def test_plan_creation_rules(db_session, people):
    trainer, _, _, other = people
    use_cases = PlanUseCases(db_session)

    with pytest.raises(ForbiddenException):
        await use_cases.create_plan(trainer, PlanCreateDTO(title="Plan", client_id=other.id))
    with pytest.raises(ValidationException):
        await use_cases.create_plan(trainer, PlanCreateDTO(title="Plan", status="live"))

    assigned = await use_cases.create_plan(
        ADMIN, PlanCreateDTO(title="Plan", client_id=other.id, trainer_id=trainer.id, status="active")
    )
    assert assigned.trainer_id == trainer.id
    assert assigned.status == "ACTIVE"


@pytest.mark.asyncio
async def test_list_and_get_plans_by_role(db_session, people):
    trainer, rival, client, other = people
    use_cases = PlanUseCases(db_session)
    plan = await use_cases.create_plan(trainer, PlanCreateDTO(title="Plan Ana", client_id=client.id))
    await use_cases.create_plan(rival, PlanCreateDTO(title="Plan libre"))

    assert [row.id for row in await use_cases.list_plans(trainer)] == [plan.id]
    assert [row.id for row in await use_cases.list_plans(client)] == [plan.id]
    assert await use_cases.list_plans(other) == []
    assert len(await use_cases.list_plans(ADMIN)) == 2
    assert (await use_cases.get_plan(client, plan.id)).title == "Plan Ana"
    with pytest.raises(ForbiddenException):
        await use_cases.get_plan(other, plan.id)
    with pytest.raises(EntityNotFoundException):
        await use_cases.get_plan(ADMIN, "missing")


@pytest.mark.asyncio
async def test_update_plan_rules(db_session, people):
    trainer, rival, client, _ = people
    use_cases = PlanUseCases(db_session)
    plan = await use_cases.create_plan(
        trainer, PlanCreateDTO(title="Plan", client_id=client.id, start_date=date(2025, 3, 1))
    )

    with pytest.raises(ForbiddenException):
        await use_cases.update_plan(rival, plan.id, PlanUpdateDTO(title="Mío"))
    with pytest.raises(ForbiddenException):
        await use_cases.update_plan(client, plan.id, PlanUpdateDTO(title="Mío"))
    with pytest.raises(ValidationException):
        await use_cases.update_plan(trainer, plan.id, PlanUpdateDTO(end_date=date(2025, 2, 1)))
    with pytest.raises(EntityNotFoundException):
        await use_cases.update_plan(trainer, "missing", PlanUpdateDTO(title="X"))

    updated = await use_cases.update_plan(
        trainer, plan.id, PlanUpdateDTO(status="active", end_date=date(2025, 3, 29), title=None)
    )
    assert updated.status == "ACTIVE"
    assert updated.title == "Plan"
    assert updated.end_date == date(2025, 3, 29)


@pytest.mark.asyncio
async def test_admin_plan_edit_is_audited(db_session, people):
    trainer, _, client, _ = people
    use_cases = PlanUseCases(db_session)
    plan = await use_cases.create_plan(trainer, PlanCreateDTO(title="Plan", client_id=client.id))

    await use_cases.update_plan(ADMIN, plan.id, PlanUpdateDTO(notes="Revisado"))

    rows = (await db_session.execute(select(AuditLogModel))).scalars().all()
    assert [(row.kind, row.target_id, row.details) for row in rows] == [
        ("PLAN_UPDATE", plan.id, {"fields": ["notes"]})
    ]


# --- mensajes -------------------------------------------------------------

@pytest.mark.asyncio
async def test_send_message_and_unread_counts(db_session, people):
    trainer, _, client, _ = people
    use_cases = MessageUseCases(db_session)

    sent = await use_cases.send(client, MessageCreateDTO(to_id=trainer.id, body=" Hola Rita ", channel="WhatsApp"))

    assert sent.body == "Hola Rita"
    assert sent.channel == "whatsapp"
    assert sent.sent_at is not None
    inbox, unread = await use_cases.list_messages(trainer)
    assert [row.id for row in inbox] == [sent.id]
    assert unread == 1
    _, client_unread = await use_cases.list_messages(client, counterpart_id=trainer.id)
    assert client_unread == 0

    read = await use_cases.mark_read(trainer, sent.id)
    assert read.read_at is not None
    _, unread = await use_cases.list_messages(trainer)
    assert unread == 0


@pytest.mark.asyncio
async def test_send_message_validation(db_session, people):
    trainer, _, client, _ = people
    use_cases = MessageUseCases(db_session)

    with pytest.raises(ValidationException):
        await use_cases.send(client, MessageCreateDTO(to_id=client.id, body="Yo"))
    with pytest.raises(ValidationException):
        await use_cases.send(client, MessageCreateDTO(to_id=trainer.id, body="   "))
    with pytest.raises(EntityNotFoundException):
        await use_cases.send(client, MessageCreateDTO(to_id="missing", body="Hola"))


@pytest.mark.asyncio
async def test_only_recipient_marks_message_read(db_session, people):
    trainer, _, client, other = people
    use_cases = MessageUseCases(db_session)
    sent = await use_cases.send(client, MessageCreateDTO(to_id=trainer.id, body="Hola"))

    with pytest.raises(ForbiddenException):
        await use_cases.mark_read(other, sent.id)
    with pytest.raises(EntityNotFoundException):
        await use_cases.mark_read(trainer, "missing")


@pytest.mark.asyncio
async def test_conversation_filter(db_session, people):
    trainer, rival, client, _ = people
    use_cases = MessageUseCases(db_session)
    await use_cases.send(client, MessageCreateDTO(to_id=trainer.id, body="Para Rita"))
    await use_cases.send(client, MessageCreateDTO(to_id=rival.id, body="Para João"))

    conversation, _ = await use_cases.list_messages(client, counterpart_id=rival.id)
    everything, _ = await use_cases.list_messages(client)

    assert [row.body for row in conversation] == ["Para João"]
    assert len(everything) == 2


# --- notificaciones -------------------------------------------------------

@pytest.mark.asyncio
async def test_notifications_read_flow(db_session, people):
    _, _, client, other = people
    db_session.add_all([
        NotificationModel(user_id=client.id, title="Uno"),
        NotificationModel(user_id=client.id, title="Dos"),
        NotificationModel(user_id=other.id, title="Ajena"),
    ])
    await db_session.flush()
    use_cases = NotificationUseCases(db_session)

    rows, unread = await use_cases.list_notifications(client)
    assert unread == 2
    assert sorted(row.title for row in rows) == ["Dos", "Uno"]

    first = await use_cases.mark_read(client, rows[0].id)
    assert first.read is True
    assert await use_cases.mark_all_read(client) == 1
    pending, unread = await use_cases.list_notifications(client, unread_only=True)
    assert pending == []
    assert unread == 0

    foreign, _ = await use_cases.list_notifications(other)
    with pytest.raises(ForbiddenException):
        await use_cases.mark_read(client, foreign[0].id)
