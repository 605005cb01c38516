from __future__ import annotations

from pathlib import Path

import pytest

from user_registration.db.migrations import apply_migrations
from user_registration.errors import DuplicateEmailError, StoreError
from user_registration.services.user_store import UserStore


@pytest.fixture()
def user_store(tmp_path: Path):
    store = UserStore.from_url(f"sqlite:///{tmp_path / 'store.db'}")
    apply_migrations(store.engine)
    yield store
    store.close()


def _insert(store: UserStore, **overrides) -> int:
    values = {
        "fullname": "Grace Hopper",
        "email": "grace@example.com",
        "password_hash": "$2b$04$abcdefghijklmnopqrstuu1234567890123456789012345678901",
        "age": 85,
        "gender": "female",
    }
    values.update(overrides)
    return store.insert(**values)


def test_insert_and_find(user_store: UserStore) -> None:
    user_id = _insert(user_store, profile_image="profile-1-2.png", cv_filename="cv-1-2.pdf")
    assert user_id > 0

    full = user_store.find_by_email("grace@example.com")
    assert full is not None
    assert full.id == user_id
    assert full.password.startswith("$2b$")

    projected = user_store.find_by_id(user_id)
    assert projected is not None
    assert projected.fullname == "Grace Hopper"
    assert projected.profile_image == "profile-1-2.png"
    assert projected.cv_filename == "cv-1-2.pdf"
    assert projected.reg_date is not None
    assert "password" not in projected.model_dump()


def test_missing_records_are_none(user_store: UserStore) -> None:
    assert user_store.find_by_email("nobody@example.com") is None
    assert user_store.find_by_id(12345) is None


def test_duplicate_email_is_distinguished(user_store: UserStore) -> None:
    _insert(user_store)
    with pytest.raises(DuplicateEmailError):
        _insert(user_store, fullname="Other")
    # The store stays usable after a rolled-back insert.
    assert _insert(user_store, email="other@example.com") > 0


def test_missing_table_is_a_store_error(tmp_path: Path) -> None:
    store = UserStore.from_url(f"sqlite:///{tmp_path / 'empty.db'}")
    try:
        with pytest.raises(StoreError):
            store.find_by_id(1)
        with pytest.raises(StoreError):
            _insert(store)
    finally:
        store.close()


def test_ping(user_store: UserStore) -> None:
    assert user_store.ping() is True
