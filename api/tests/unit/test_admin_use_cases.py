"""
Tests de administracion de cuentas y notificaciones masivas.
"""
import pytest
from sqlalchemy import select

from conftest import create_user
from fitdash.application.use_cases.admin_use_cases import AdminUseCases
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.database.models import AuditLogModel, NotificationModel
from fitdash.shared.constants.roles import Role
from fitdash.shared.exceptions.domain import EntityNotFoundException, ValidationException


ADMIN = SessionUser(id="admin-1", role=Role.ADMIN, name="Admin")


async def _audit_kinds(db_session):
    result = await db_session.execute(select(AuditLogModel).order_by(AuditLogModel.id))
    return [row.kind for row in result.scalars().all()]


async def _notices_for(db_session, user_id):
    result = await db_session.execute(select(NotificationModel).where(NotificationModel.user_id == user_id))
    return result.scalars().all()


@pytest.mark.asyncio
async def test_list_users_accepts_role_synonyms_and_legacy_status(db_session):
    await create_user(db_session, "rita@fit.pt", role="TRAINER")
    await create_user(db_session, "ana@fit.pt", role="CLIENT", status="ACTIVE")
    await create_user(db_session, "bruno@fit.pt", role="CLIENT", status="PENDING")
    use_cases = AdminUseCases(db_session)

    trainers = await use_cases.list_users(role="Personal Trainer")
    pending = await use_cases.list_users(status="pending")
    active_clients = await use_cases.list_users(role="cliente", status="approved")

    assert [user.email for user in trainers] == ["rita@fit.pt"]
    assert trainers[0].role == "PT"
    assert [user.email for user in pending] == ["bruno@fit.pt"]
    assert [user.email for user in active_clients] == ["ana@fit.pt"]


@pytest.mark.asyncio
async def test_list_users_rejects_unknown_filters(db_session):
    use_cases = AdminUseCases(db_session)

    with pytest.raises(ValidationException):
        await use_cases.list_users(role="guest")
    with pytest.raises(ValidationException):
        await use_cases.list_users(status="bogus")


@pytest.mark.asyncio
async def test_list_users_search(db_session):
    await create_user(db_session, "ana@fit.pt", name="Ana Silva")
    await create_user(db_session, "bruno@fit.pt", name="Bruno")

    found = await AdminUseCases(db_session).list_users(search="SILVA")

    assert [user.email for user in found] == ["ana@fit.pt"]


@pytest.mark.asyncio
async def test_list_users_matches_stored_legacy_status(db_session):
    await create_user(db_session, "ana@fit.pt", status="APPROVED")
    await create_user(db_session, "bruno@fit.pt", status="approved")
    await create_user(db_session, "carla@fit.pt", status="REJECTED")
    use_cases = AdminUseCases(db_session)

    active = await use_cases.list_users(status="active")
    suspended = await use_cases.list_users(status="SUSPENDED")

    assert sorted(user.email for user in active) == ["ana@fit.pt", "bruno@fit.pt"]
    assert {user.status for user in active} == {"ACTIVE"}
    assert [user.email for user in suspended] == ["carla@fit.pt"]


@pytest.mark.asyncio
async def test_broadcast_reaches_accounts_with_legacy_active_status(db_session):
    ana = await create_user(db_session, "ana@fit.pt", status="APPROVED")
    await create_user(db_session, "bruno@fit.pt", status="REJECTED")

    sent = await AdminUseCases(db_session).broadcast(ADMIN, "Aviso", role="client")

    assert sent == 1
    assert len(await _notices_for(db_session, ana.id)) == 1


@pytest.mark.asyncio
async def test_approve_user_by_email(db_session):
    pending = await create_user(db_session, "ana@fit.pt", status="PENDING")

    approved = await AdminUseCases(db_session).approve_user(ADMIN, email="ANA@fit.pt")

    assert approved.id == pending.id
    assert approved.status == "ACTIVE"
    assert approved.status_changed_at is not None
    notices = await _notices_for(db_session, pending.id)
    assert [notice.title for notice in notices] == ["Cuenta aprobada"]
    assert notices[0].type == "account"
    assert await _audit_kinds(db_session) == ["USER_APPROVE"]


@pytest.mark.asyncio
async def test_approve_user_by_id_records_approver(db_session):
    pending = await create_user(db_session, "ana@fit.pt", status="PENDING")

    await AdminUseCases(db_session).approve_user(ADMIN, user_id=pending.id)

    await db_session.refresh(pending)
    assert pending.status == "ACTIVE"
    assert pending.approved_by == ADMIN.id


@pytest.mark.asyncio
async def test_approve_already_active_user_sends_no_notice(db_session):
    active = await create_user(db_session, "ana@fit.pt", status="ACTIVE")

    await AdminUseCases(db_session).approve_user(ADMIN, user_id=active.id)

    assert await _notices_for(db_session, active.id) == []
    assert await _audit_kinds(db_session) == ["USER_APPROVE"]


@pytest.mark.asyncio
async def test_approve_user_requires_identifier(db_session):
    with pytest.raises(ValidationException) as exc_info:
        await AdminUseCases(db_session).approve_user(ADMIN, user_id="  ", email="")

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_approve_unknown_user(db_session):
    with pytest.raises(EntityNotFoundException):
        await AdminUseCases(db_session).approve_user(ADMIN, email="nadie@fit.pt")


@pytest.mark.asyncio
async def test_set_status_accepts_legacy_values(db_session):
    user = await create_user(db_session, "ana@fit.pt", status="ACTIVE")

    updated = await AdminUseCases(db_session).set_status(ADMIN, user.id, "rejected")

    assert updated.status == "SUSPENDED"
    notices = await _notices_for(db_session, user.id)
    assert [notice.title for notice in notices] == ["Cuenta suspendida"]
    assert await _audit_kinds(db_session) == ["USER_STATUS_CHANGE"]


@pytest.mark.asyncio
async def test_set_status_validation(db_session):
    user = await create_user(db_session, "ana@fit.pt")
    use_cases = AdminUseCases(db_session)

    with pytest.raises(ValidationException):
        await use_cases.set_status(ADMIN, user.id, "archived")
    with pytest.raises(EntityNotFoundException):
        await use_cases.set_status(ADMIN, "missing", "ACTIVE")


@pytest.mark.asyncio
async def test_broadcast_to_role_reaches_only_active_accounts(db_session):
    ana = await create_user(db_session, "ana@fit.pt", role="CLIENT")
    await create_user(db_session, "bruno@fit.pt", role="CLIENT", status="PENDING")
    rita = await create_user(db_session, "rita@fit.pt", role="TRAINER")

    sent = await AdminUseCases(db_session).broadcast(ADMIN, " Nuevo horario ", body="Desde lunes", role="client")

    assert sent == 1
    notices = await _notices_for(db_session, ana.id)
    assert [(n.title, n.body, n.type) for n in notices] == [("Nuevo horario", "Desde lunes", "broadcast")]
    assert await _notices_for(db_session, rita.id) == []
    assert await _audit_kinds(db_session) == ["NOTIFICATION_BROADCAST"]


@pytest.mark.asyncio
async def test_broadcast_to_everyone(db_session):
    await create_user(db_session, "ana@fit.pt", role="CLIENT")
    await create_user(db_session, "rita@fit.pt", role="TRAINER")
    await create_user(db_session, "admin@fit.pt", role="ADMIN")

    assert await AdminUseCases(db_session).broadcast(ADMIN, "Mantenimiento") == 3


@pytest.mark.asyncio
async def test_broadcast_to_single_user(db_session):
    ana = await create_user(db_session, "ana@fit.pt", status="PENDING")
    use_cases = AdminUseCases(db_session)

    assert await use_cases.broadcast(ADMIN, "Hola", user_id=ana.id, type="info") == 1
    with pytest.raises(EntityNotFoundException):
        await use_cases.broadcast(ADMIN, "Hola", user_id="missing")


@pytest.mark.asyncio
async def test_broadcast_validation(db_session):
    use_cases = AdminUseCases(db_session)

    with pytest.raises(ValidationException):
        await use_cases.broadcast(ADMIN, "   ")
    with pytest.raises(ValidationException):
        await use_cases.broadcast(ADMIN, "Hola", role="guest")
