"""
Tests de login y registro.
"""
import pytest
from sqlalchemy import select

from conftest import create_user
from fitdash.application.dto.auth_dto import RegisterRequestDTO
from fitdash.application.use_cases.auth_use_cases import AuthUseCases
from fitdash.core.security import security_service
from fitdash.infrastructure.database.models import AuditLogModel, UserModel
from fitdash.shared.constants.roles import Role
from fitdash.shared.exceptions.auth import (
    AccountNotActiveException,
    InvalidCredentialsException,
    RateLimitedException,
)
from fitdash.shared.exceptions.domain import EntityAlreadyExistsException, ValidationException
from fitdash.shared.utils.rate_limit import RateLimiter


@pytest.fixture
def limiter():
    return RateLimiter(limit=3, window_seconds=60, prefix="login-test")


@pytest.mark.asyncio
async def test_login_by_email_returns_session_and_token(db_session, limiter):
    user = await create_user(db_session, "rita@fit.pt", role="TRAINER", name="Rita", password="segura123")

    session, token = await AuthUseCases(db_session, limiter).login("  rita@fit.pt ", "segura123", "1.1.1.1")

    assert session.id == user.id
    assert session.role is Role.PT
    claims = security_service.decode_access_token(token)
    assert claims["sub"] == user.id
    assert claims["role"] == "PT"

    audit = (await db_session.execute(select(AuditLogModel))).scalars().all()
    assert [row.kind for row in audit] == ["LOGIN"]
    refreshed = (await db_session.execute(select(UserModel).where(UserModel.id == user.id))).scalar_one()
    assert refreshed.last_login_at is not None


@pytest.mark.asyncio
async def test_login_by_id(db_session, limiter):
    user = await create_user(db_session, "ana@fit.pt", password="segura123")

    session, _ = await AuthUseCases(db_session, limiter).login(user.id, "segura123", "1.1.1.1")

    assert session.role is Role.CLIENT


@pytest.mark.asyncio
async def test_login_wrong_password(db_session, limiter):
    await create_user(db_session, "ana@fit.pt", password="segura123")

    with pytest.raises(InvalidCredentialsException):
        await AuthUseCases(db_session, limiter).login("ana@fit.pt", "otra", "1.1.1.1")


@pytest.mark.asyncio
async def test_login_unknown_user(db_session, limiter):
    with pytest.raises(InvalidCredentialsException):
        await AuthUseCases(db_session, limiter).login("nadie@fit.pt", "x", "1.1.1.1")


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["PENDING", "SUSPENDED", "rejected"])
async def test_login_requires_active_account(db_session, limiter, status):
    await create_user(db_session, "ana@fit.pt", status=status, password="segura123")

    with pytest.raises(AccountNotActiveException) as exc_info:
        await AuthUseCases(db_session, limiter).login("ana@fit.pt", "segura123", "1.1.1.1")

    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_login_legacy_approved_status_is_active(db_session, limiter):
    await create_user(db_session, "ana@fit.pt", status="APPROVED", password="segura123")

    session, _ = await AuthUseCases(db_session, limiter).login("ana@fit.pt", "segura123", "1.1.1.1")

    assert session.email == "ana@fit.pt"


@pytest.mark.asyncio
async def test_login_is_rate_limited_per_fingerprint(db_session, limiter):
    use_cases = AuthUseCases(db_session, limiter)
    for _ in range(3):
        with pytest.raises(InvalidCredentialsException):
            await use_cases.login("nadie@fit.pt", "x", "9.9.9.9")

    with pytest.raises(RateLimitedException) as exc_info:
        await use_cases.login("nadie@fit.pt", "x", "9.9.9.9")

    assert exc_info.value.status_code == 429
    assert exc_info.value.details["retry_after"] > 0
    assert exc_info.value.headers["x-ratelimit-remaining"] == "0"

    # Otra IP sigue pudiendo intentarlo
    with pytest.raises(InvalidCredentialsException):
        await use_cases.login("nadie@fit.pt", "x", "8.8.8.8")


@pytest.mark.asyncio
async def test_register_creates_pending_account(db_session, limiter):
    dto = RegisterRequestDTO(email=" Nova@Fit.pt ", password="segura123", name=" Nova ", role="treinador")

    user = await AuthUseCases(db_session, limiter).register(dto)

    assert user.email == "nova@fit.pt"
    assert user.name == "Nova"
    assert user.role == "PT"
    assert user.status == "PENDING"
    stored = (await db_session.execute(select(UserModel))).scalar_one()
    assert stored.role == "TRAINER"
    assert security_service.verify_password("segura123", stored.password_hash)


@pytest.mark.asyncio
async def test_register_rejects_admin_role(db_session, limiter):
    dto = RegisterRequestDTO(email="root@fit.pt", password="segura123", role="admin")

    with pytest.raises(ValidationException):
        await AuthUseCases(db_session, limiter).register(dto)


@pytest.mark.asyncio
async def test_register_duplicate_email(db_session, limiter):
    await create_user(db_session, "ana@fit.pt")
    dto = RegisterRequestDTO(email="ANA@fit.pt", password="segura123")

    with pytest.raises(EntityAlreadyExistsException) as exc_info:
        await AuthUseCases(db_session, limiter).register(dto)

    assert exc_info.value.status_code == 409
