"""Shared fixtures: a throwaway SQLite ledger per test, seeded with the fixed accounts."""

import os
import tempfile

# must be set before ledger_service.config is imported
os.environ["ACCOUNT_LIMITS"] = "1:1000,2:80000,3:1000000,4:10000000,5:500000"
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "ledger-service-unused.db")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from ledger_service.config import ACCOUNT_LIMITS
from ledger_service.db import get_session, init_db, make_engine, seed_accounts
from ledger_service.main import app


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    init_db(eng)
    seed_accounts(ACCOUNT_LIMITS, eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()
