"""
Tests del ciclo de vida de la aplicacion (inicio y cierre).
"""
import pytest

from fitdash.core import events
from fitdash.shared.utils.audit_logger import AuditLogger


@pytest.fixture
def lifecycle_calls(monkeypatch, tmp_path):
    calls = []

    async def fake_init_db():
        calls.append("init_db")

    async def fake_close_db():
        calls.append("close_db")

    monkeypatch.setattr(events, "init_db", fake_init_db)
    monkeypatch.setattr(events, "close_db", fake_close_db)
    monkeypatch.setattr(events.settings, "LOG_FILE", str(tmp_path / "app.log"))
    monkeypatch.setattr(AuditLogger, "AUDIT_LOG_DIR", tmp_path / "audit")
    return calls


def test_application_factory_uses_lifespan(app):
    assert app.router.lifespan_context is not None
    assert any(route.path == "/health" for route in app.routes)


@pytest.mark.asyncio
async def test_lifespan_initializes_and_closes_resources(app, lifecycle_calls):
    async with events.lifespan(app):
        assert lifecycle_calls == ["init_db"]
        assert AuditLogger._initialized

    assert lifecycle_calls == ["init_db", "close_db"]
    assert not AuditLogger._initialized


@pytest.mark.asyncio
async def test_lifespan_closes_resources_on_error(app, lifecycle_calls):
    with pytest.raises(RuntimeError):
        async with events.lifespan(app):
            raise RuntimeError("fallo en servicio")

    assert lifecycle_calls == ["init_db", "close_db"]
