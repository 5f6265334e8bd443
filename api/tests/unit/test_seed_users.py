"""
Tests del script de carga de cuentas.
"""
import json
from pathlib import Path

import pytest
from sqlalchemy import select

from fitdash.infrastructure.database import session as db_module
from fitdash.infrastructure.database.models import TrainerClientModel, UserModel
from scripts.seed_users import load_users_data, seed_users


SEED_FILE = Path(__file__).resolve().parents[2] / "data" / "users_seed.json"


class _SessionFactory:
    """Sustituye AsyncSessionLocal por la sesion del test."""

    def __init__(self, session):
        self.session = session

    def __call__(self):
        return self

    async def __aenter__(self):
        return self.session

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def seeded_db(db_session, monkeypatch):
    async def _noop():
        return None

    monkeypatch.setattr(db_module, "AsyncSessionLocal", _SessionFactory(db_session))
    monkeypatch.setattr(db_module, "init_db", _noop)
    return db_session


@pytest.mark.asyncio
async def test_seed_file_loads_and_inserts_accounts(seeded_db):
    data = await load_users_data(SEED_FILE)

    stats = await seed_users(data)

    assert stats["inserted"] == 4
    assert stats["linked"] == 1
    assert stats["errors"] == 0
    users = {row.email: row for row in (await seeded_db.execute(select(UserModel))).scalars().all()}
    assert users["rita@fitdash.local"].role == "TRAINER"
    assert users["bruno@fitdash.local"].status == "PENDING"
    assert users["ana@fitdash.local"].status == "ACTIVE"
    assert users["ana@fitdash.local"].password_hash
    link = (await seeded_db.execute(select(TrainerClientModel))).scalar_one()
    assert (link.trainer_id, link.client_id) == (users["rita@fitdash.local"].id, users["ana@fitdash.local"].id)


@pytest.mark.asyncio
async def test_seed_is_idempotent_and_force_updates(seeded_db):
    data = [{"email": "Ana@Fit.pt", "name": "Ana", "role": "aluno"}]
    await seed_users(data)

    skipped = await seed_users(data)
    forced = await seed_users([{"email": "ana@fit.pt", "name": "Ana Silva", "role": "client"}], force_update=True)

    assert skipped["skipped"] == 1
    assert forced["updated"] == 1
    user = (await seeded_db.execute(select(UserModel))).scalar_one()
    assert user.email == "ana@fit.pt"
    assert user.name == "Ana Silva"


@pytest.mark.asyncio
async def test_seed_dry_run_and_invalid_entries(seeded_db):
    stats = await seed_users(
        [{"email": "x@fit.pt", "role": "guest"}, {"email": "y@fit.pt", "trainer_email": "pt@fit.pt"}],
        dry_run=True,
    )

    assert stats["errors"] == 1
    assert stats["inserted"] == 1
    assert stats["linked"] == 1
    assert (await seeded_db.execute(select(UserModel))).scalars().all() == []


@pytest.mark.asyncio
async def test_load_users_data_reads_json(tmp_path):
    source = tmp_path / "users.json"
    source.write_text(json.dumps([{"email": "a@fit.pt"}]), encoding="utf-8")

    assert await load_users_data(source) == [{"email": "a@fit.pt"}]
