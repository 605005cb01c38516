from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect, text

from user_registration.database import create_db_engine
from user_registration.db.migrations import MIGRATIONS, apply_migrations, ensure_database, pending_migrations


LEGACY_USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    fullname VARCHAR(255) NOT NULL,
    email VARCHAR(255) UNIQUE NOT NULL,
    password VARCHAR(255) NOT NULL,
    age INT,
    gender VARCHAR(6),
    reg_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""


@pytest.fixture()
def engine(tmp_path: Path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'schema.db'}")
    yield engine
    engine.dispose()


def _user_columns(engine) -> set[str]:
    return {col["name"] for col in inspect(engine).get_columns("users")}


def test_fresh_database_gets_full_schema(engine) -> None:
    applied = apply_migrations(engine)
    assert applied == [m.version for m in MIGRATIONS]
    assert _user_columns(engine) == {
        "id",
        "fullname",
        "email",
        "password",
        "age",
        "gender",
        "profile_image",
        "cv_filename",
        "reg_date",
    }


def test_migrations_are_idempotent(engine) -> None:
    apply_migrations(engine)
    assert apply_migrations(engine) == []
    assert pending_migrations(engine) == []

    with engine.connect() as conn:
        versions = conn.execute(text("SELECT version FROM schema_migrations ORDER BY version")).scalars().all()
    assert versions == [1, 2, 3]


def test_legacy_table_gets_missing_columns_without_losing_rows(engine) -> None:
    with engine.begin() as conn:
        conn.execute(text(LEGACY_USERS_DDL))
        conn.execute(
            text("INSERT INTO users (fullname, email, password) VALUES (:n, :e, :p)"),
            {"n": "Old User", "e": "old@example.com", "p": "$2b$04$placeholder"},
        )

    assert "profile_image" not in _user_columns(engine)
    apply_migrations(engine)
    assert {"profile_image", "cv_filename"} <= _user_columns(engine)

    with engine.connect() as conn:
        row = conn.execute(text("SELECT fullname, profile_image, cv_filename FROM users")).one()
    assert tuple(row) == ("Old User", None, None)


def test_partially_migrated_table_only_gets_missing_column(engine) -> None:
    with engine.begin() as conn:
        conn.execute(text(LEGACY_USERS_DDL))
        conn.execute(text("ALTER TABLE users ADD COLUMN profile_image VARCHAR(255)"))

    assert apply_migrations(engine) == [1, 2, 3]
    assert {"profile_image", "cv_filename"} <= _user_columns(engine)


def test_ensure_database_ignores_sqlite(tmp_path: Path) -> None:
    ensure_database(f"sqlite:///{tmp_path / 'x.db'}")


def test_ensure_database_rejects_odd_mysql_names() -> None:
    with pytest.raises(ValueError):
        ensure_database("mysql+pymysql://root:@localhost/bad-name;drop")


def test_app_starts_even_when_provisioning_fails(settings, monkeypatch) -> None:
    from user_registration.main import create_app

    def boom(engine, db_url):
        raise RuntimeError("database unreachable")

    monkeypatch.setattr("user_registration.main.provision_schema", boom)
    app = create_app(settings)
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200


def test_startup_provisions_schema(client) -> None:
    engine = client.app.state.user_store.engine
    assert {"profile_image", "cv_filename"} <= _user_columns(engine)
    assert pending_migrations(engine) == []


def test_pending_migrations_does_not_create_ledger(engine) -> None:
    assert [m.version for m in pending_migrations(engine)] == [1, 2, 3]
    assert inspect(engine).get_table_names() == []
