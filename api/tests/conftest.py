"""
Configuración de fixtures para pytest.
"""
import os

# Configuracion de prueba antes de importar la aplicacion
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime, timezone
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from fitdash.core.security import security_service
from fitdash.domain.entities.session_user import SessionUser
from fitdash.infrastructure.database import models  # noqa: F401
from fitdash.infrastructure.database.models import TrainerClientModel, UserModel
from fitdash.infrastructure.database.session import Base, get_db
from fitdash.shared.constants.roles import Role


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Instante fijo para los builders (miercoles 5 de marzo de 2025, 10:00 UTC)
FIXED_NOW = datetime(2025, 3, 5, 10, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fixture que proporciona una sesión de base de datos para tests.
    Crea una base de datos en memoria para cada test.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def app():
    """Aplicacion FastAPI limpia por test (sin eventos de arranque)."""
    from main import create_application

    application = create_application()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture
def db_app(app, db_session):
    """Aplicacion cuyas dependencias `get_db` usan la sesion en memoria."""
    async def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    return app


def bearer_for(user: SessionUser) -> dict:
    """Cabecera Authorization para el usuario indicado."""
    token = security_service.create_access_token(user.to_claims())
    return {"Authorization": f"Bearer {token}"}


async def create_user(
    db: AsyncSession,
    email: str,
    role: str = "CLIENT",
    status: str = "ACTIVE",
    name: Optional[str] = None,
    password: Optional[str] = None,
) -> UserModel:
    """Inserta un usuario directamente en la BD de prueba."""
    user = UserModel(
        email=email,
        name=name or email.split("@")[0].title(),
        role=role,
        status=status,
        password_hash=security_service.hash_password(password) if password else None,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def link_client(db: AsyncSession, trainer_id: str, client_id: str) -> None:
    db.add(TrainerClientModel(trainer_id=trainer_id, client_id=client_id))
    await db.flush()


def session_user(user: UserModel, role: Optional[Role] = None) -> SessionUser:
    """SessionUser equivalente a una fila de usuarios."""
    from fitdash.shared.constants.roles import normalize_role

    return SessionUser(
        id=user.id,
        role=role or normalize_role(user.role),
        email=user.email,
        name=user.name,
    )


def broken_db() -> AsyncMock:
    """Sesion cuyas consultas fallan como si la BD no respondiera."""
    db = AsyncMock()
    db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    return db
