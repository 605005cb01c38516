from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient


# Smallest valid 1x1 PNG and a tiny PDF header; content is never parsed.
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)
PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n"


def pytest_configure() -> None:
    # Keep a developer's local .env out of the test run.
    os.environ["ENVIRONMENT"] = "test"


@pytest.fixture()
def settings(tmp_path: Path):
    from user_registration.config import Settings

    return Settings(
        db_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        public_dir=str(tmp_path / "public"),
        bcrypt_rounds=4,
        log_level="DEBUG",
    )


@pytest.fixture()
def client(settings) -> Any:
    from user_registration.main import create_app

    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def store(client):
    return client.app.state.user_store


def registration_fields(**overrides: Any) -> dict[str, Any]:
    fields = {
        "fullname": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "SecretPass123",
        "age": "36",
        "gender": "female",
    }
    fields.update(overrides)
    return {k: v for k, v in fields.items() if v is not None}


def register(client, files: Any = None, **overrides: Any):
    return client.post("/register", data=registration_fields(**overrides), files=files)
