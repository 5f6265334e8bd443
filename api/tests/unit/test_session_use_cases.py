"""
Tests de agenda: sesiones, exportacion ICS y pedidos de sesion.
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from conftest import FIXED_NOW, create_user, link_client, session_user
from fitdash.application.dto.session_dto import (
    SessionCreateDTO,
    SessionRequestCreateDTO,
    SessionUpdateDTO,
)
from fitdash.application.use_cases.profile_use_cases import ProfileUseCases
from fitdash.application.use_cases.session_use_cases import SessionUseCases
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.database.models import (
    AuditLogModel,
    NotificationModel,
    TrainerClientModel,
    TrainingSessionModel,
)
from fitdash.shared.constants.roles import Role
from fitdash.shared.exceptions.auth import ForbiddenException
from fitdash.shared.exceptions.domain import EntityNotFoundException, ValidationException


ADMIN = SessionUser(id="admin-1", role=Role.ADMIN, name="Admin")


@pytest.fixture
async def people(db_session):
    trainer = await create_user(db_session, "rita@fit.pt", role="TRAINER", name="Rita")
    client = await create_user(db_session, "ana@fit.pt", role="CLIENT", name="Ana")
    other = await create_user(db_session, "bruno@fit.pt", role="CLIENT", name="Bruno")
    return session_user(trainer), session_user(client), session_user(other)


async def _notifications_for(db_session, user_id):
    result = await db_session.execute(select(NotificationModel).where(NotificationModel.user_id == user_id))
    return result.scalars().all()


@pytest.mark.asyncio
async def test_trainer_creates_session_for_linked_client(db_session, people):
    trainer, client, _ = people
    await link_client(db_session, trainer.id, client.id)
    dto = SessionCreateDTO(client_id=client.id, scheduled_at=FIXED_NOW + timedelta(days=1), location="Box")

    session = await SessionUseCases(db_session).create_session(trainer, dto)

    assert session.trainer_id == trainer.id
    assert session.status == "scheduled"
    notices = await _notifications_for(db_session, client.id)
    assert [notice.title for notice in notices] == ["Nueva sesión agendada"]


@pytest.mark.asyncio
async def test_trainer_cannot_schedule_unlinked_client(db_session, people):
    trainer, _, other = people
    use_cases = SessionUseCases(db_session)

    with pytest.raises(ForbiddenException):
        await use_cases.create_session(trainer, SessionCreateDTO(client_id=other.id, scheduled_at=FIXED_NOW))

    assert (await db_session.execute(select(TrainerClientModel))).scalars().all() == []
    assert (await db_session.execute(select(TrainingSessionModel))).scalars().all() == []
    with pytest.raises(ForbiddenException):
        await ProfileUseCases(db_session).list_notes(trainer, other.id)


@pytest.mark.asyncio
async def test_session_target_must_be_a_client(db_session, people):
    trainer, _, _ = people
    colleague = await create_user(db_session, "joao@fit.pt", role="TRAINER")

    with pytest.raises(ValidationException):
        await SessionUseCases(db_session).create_session(
            trainer, SessionCreateDTO(client_id=colleague.id, scheduled_at=FIXED_NOW)
        )


@pytest.mark.asyncio
async def test_admin_schedules_and_links_client(db_session, people):
    trainer, client, _ = people
    use_cases = SessionUseCases(db_session)

    session = await use_cases.create_session(
        ADMIN, SessionCreateDTO(client_id=client.id, trainer_id=trainer.id, scheduled_at=FIXED_NOW)
    )

    assert session.trainer_id == trainer.id
    links = (await db_session.execute(select(TrainerClientModel))).scalars().all()
    assert [(link.trainer_id, link.client_id) for link in links] == [(trainer.id, client.id)]
    with pytest.raises(ValidationException):
        await use_cases.create_session(ADMIN, SessionCreateDTO(client_id=client.id, scheduled_at=FIXED_NOW))
    with pytest.raises(ValidationException):
        await use_cases.create_session(
            ADMIN, SessionCreateDTO(client_id=client.id, trainer_id=client.id, scheduled_at=FIXED_NOW)
        )


@pytest.mark.asyncio
async def test_create_session_for_unknown_client(db_session, people):
    trainer, _, _ = people
    dto = SessionCreateDTO(client_id="missing", scheduled_at=FIXED_NOW)

    with pytest.raises(EntityNotFoundException):
        await SessionUseCases(db_session).create_session(trainer, dto)


@pytest.mark.asyncio
async def test_list_sessions_by_participant(db_session, people):
    trainer, client, other = people
    await link_client(db_session, trainer.id, client.id)
    await link_client(db_session, trainer.id, other.id)
    use_cases = SessionUseCases(db_session)
    await use_cases.create_session(trainer, SessionCreateDTO(client_id=client.id, scheduled_at=FIXED_NOW))
    await use_cases.create_session(trainer, SessionCreateDTO(client_id=other.id, scheduled_at=FIXED_NOW + timedelta(hours=2)))

    assert len(await use_cases.list_sessions(trainer)) == 2
    assert len(await use_cases.list_sessions(client)) == 1
    assert len(await use_cases.list_sessions(ADMIN)) == 2

    with pytest.raises(ValidationException):
        await use_cases.list_sessions(trainer, start=FIXED_NOW, end=FIXED_NOW - timedelta(days=1))


@pytest.mark.asyncio
async def test_client_can_only_update_attendance(db_session, people):
    trainer, client, _ = people
    await link_client(db_session, trainer.id, client.id)
    use_cases = SessionUseCases(db_session)
    session = await use_cases.create_session(trainer, SessionCreateDTO(client_id=client.id, scheduled_at=FIXED_NOW))

    updated = await use_cases.update_session(
        client, session.id, SessionUpdateDTO(client_attendance_status=" Confirmed ")
    )
    assert updated.client_attendance_status == "confirmed"

    with pytest.raises(ForbiddenException):
        await use_cases.update_session(client, session.id, SessionUpdateDTO(location="Casa"))


@pytest.mark.asyncio
async def test_non_participant_cannot_see_session(db_session, people):
    trainer, client, other = people
    await link_client(db_session, trainer.id, client.id)
    use_cases = SessionUseCases(db_session)
    session = await use_cases.create_session(trainer, SessionCreateDTO(client_id=client.id, scheduled_at=FIXED_NOW))

    with pytest.raises(ForbiddenException):
        await use_cases.export_ics(other, session.id)
    with pytest.raises(EntityNotFoundException):
        await use_cases.export_ics(client, "missing")


@pytest.mark.asyncio
async def test_export_ics(db_session, people):
    trainer, client, _ = people
    await link_client(db_session, trainer.id, client.id)
    use_cases = SessionUseCases(db_session)
    session = await use_cases.create_session(
        trainer,
        SessionCreateDTO(client_id=client.id, scheduled_at=datetime(2025, 3, 6, 9, 0, tzinfo=timezone.utc), duration_min=45),
    )

    filename, content = await use_cases.export_ics(client, session.id)

    assert filename == f"sesion-{session.id}.ics"
    assert "DTSTART:20250306T090000Z" in content
    assert "DTEND:20250306T094500Z" in content
    assert "SUMMARY:Sesión con Rita" in content


@pytest.mark.asyncio
async def test_request_defaults_to_linked_trainer_and_is_approved(db_session, people):
    trainer, client, _ = people
    await link_client(db_session, trainer.id, client.id)
    use_cases = SessionUseCases(db_session)

    request = await use_cases.create_request(
        client, SessionRequestCreateDTO(requested_start=FIXED_NOW + timedelta(days=2), notes="Piernas")
    )
    assert request.trainer_id == trainer.id
    assert request.kind == "new"
    assert request.status == "pending"
    assert [n.title for n in await _notifications_for(db_session, trainer.id)] == ["Nuevo pedido de sesión"]

    decided, session = await use_cases.decide_request(trainer, request.id, "Approved")

    assert decided.status == "approved"
    assert decided.decided_by == trainer.id
    assert decided.session_id == session.id
    assert session.client_id == client.id
    assert session.notes == "Piernas"
    kinds = (await db_session.execute(select(AuditLogModel.kind))).scalars().all()
    assert kinds == ["SESSION_REQUEST_DECISION"]

    with pytest.raises(ValidationException):
        await use_cases.decide_request(trainer, request.id, "rejected")


@pytest.mark.asyncio
async def test_reschedule_moves_existing_session(db_session, people):
    trainer, client, _ = people
    await link_client(db_session, trainer.id, client.id)
    use_cases = SessionUseCases(db_session)
    session = await use_cases.create_session(trainer, SessionCreateDTO(client_id=client.id, scheduled_at=FIXED_NOW))
    new_start = FIXED_NOW + timedelta(days=3)

    request = await use_cases.create_request(
        client, SessionRequestCreateDTO(session_id=session.id, requested_start=new_start)
    )
    assert request.kind == "reschedule"

    _, moved = await use_cases.decide_request(ADMIN, request.id, "approved")

    assert moved.id == session.id
    stored = (await db_session.execute(select(TrainingSessionModel))).scalars().all()
    assert len(stored) == 1


@pytest.mark.asyncio
async def test_rejected_request_creates_no_session(db_session, people):
    trainer, client, _ = people
    await link_client(db_session, trainer.id, client.id)
    use_cases = SessionUseCases(db_session)
    request = await use_cases.create_request(client, SessionRequestCreateDTO(requested_start=FIXED_NOW))

    decided, session = await use_cases.decide_request(trainer, request.id, "declined")

    assert decided.status == "rejected"
    assert session is None
    notices = await _notifications_for(db_session, client.id)
    assert [n.title for n in notices] == ["Tu pedido de sesión fue rechazado"]


@pytest.mark.asyncio
async def test_request_rules(db_session, people):
    trainer, client, other = people
    use_cases = SessionUseCases(db_session)

    # Sin PT vinculado ni indicado
    with pytest.raises(ValidationException):
        await use_cases.create_request(client, SessionRequestCreateDTO(requested_start=FIXED_NOW))

    await link_client(db_session, trainer.id, client.id)
    session = await use_cases.create_session(trainer, SessionCreateDTO(client_id=client.id, scheduled_at=FIXED_NOW))
    with pytest.raises(ForbiddenException):
        await use_cases.create_request(other, SessionRequestCreateDTO(session_id=session.id, requested_start=FIXED_NOW))

    request = await use_cases.create_request(client, SessionRequestCreateDTO(requested_start=FIXED_NOW))
    another_trainer = SessionUser(id="pt-2", role=Role.PT)
    with pytest.raises(ForbiddenException):
        await use_cases.decide_request(another_trainer, request.id, "approved")
    with pytest.raises(ValidationException):
        await use_cases.decide_request(trainer, request.id, "maybe")


@pytest.mark.asyncio
async def test_list_requests_by_role(db_session, people):
    trainer, client, _ = people
    await link_client(db_session, trainer.id, client.id)
    use_cases = SessionUseCases(db_session)
    first = await use_cases.create_request(client, SessionRequestCreateDTO(requested_start=FIXED_NOW))
    await use_cases.create_request(client, SessionRequestCreateDTO(requested_start=FIXED_NOW + timedelta(days=1)))
    await use_cases.decide_request(trainer, first.id, "approved")

    assert len(await use_cases.list_requests(trainer)) == 2
    assert len(await use_cases.list_requests(client, status="pending")) == 1
    assert len(await use_cases.list_requests(ADMIN, status="approved")) == 1
