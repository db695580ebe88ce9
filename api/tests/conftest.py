import os
import tempfile
from pathlib import Path

# Tests always run against a throwaway SQLite file, never a configured database.
_DB_DIR = Path(tempfile.mkdtemp(prefix="wasilah-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'wasilah.db'}"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ADMIN_PASSWORD", "letmein")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")

import pytest
from sqlalchemy import text

from wasilah.database import SessionLocal
from wasilah.main import run_migrations
from wasilah.services.rate_limit import limiter


@pytest.fixture(autouse=True)
def clean_db():
    run_migrations()
    with SessionLocal() as db:
        for table in ("mutual_match", "selection", "participant"):
            db.execute(text(f"DELETE FROM {table}"))
        db.commit()
    limiter.reset()
    yield


@pytest.fixture
def roster():
    from wasilah.services.roster import import_records

    rows = [
        {"id": 1, "first_name": "Aisha", "gender": "female", "email": "aisha@example.com"},
        {"id": 2, "first_name": "Bilal", "gender": "male", "email": "bilal@example.com"},
        {"id": 3, "first_name": "Cyrus", "gender": "male", "email": "cyrus@example.com"},
        {"id": 4, "first_name": "Dina", "gender": "female", "email": "dina@example.com"},
        {"id": 5, "first_name": "Dina", "gender": "female", "email": "dina.k@example.com"},
    ]
    summary = import_records(rows)
    assert summary.participants_added == len(rows)
    with SessionLocal() as db:
        tokens = db.execute(text("SELECT id, token FROM participant")).mappings().all()
    return {int(r["id"]): r["token"] for r in tokens}
