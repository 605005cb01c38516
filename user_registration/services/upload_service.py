# upload_service.py
from __future__ import annotations

import logging
import os
import random
import re
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from starlette.datastructures import FormData, UploadFile

from user_registration.errors import ServerError, UploadRejectedError


logger = logging.getLogger(__name__)

IMAGE_FIELD = "image"
CV_FIELD = "cv"

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")
_MAX_NAME_ATTEMPTS = 5


@dataclass(frozen=True)
class UploadRule:
    field: str
    prefix: str
    accepts: Callable[[str], bool]


UPLOAD_RULES: dict[str, UploadRule] = {
    IMAGE_FIELD: UploadRule(IMAGE_FIELD, "profile", lambda mime: mime.startswith("image/")),
    CV_FIELD: UploadRule(CV_FIELD, "cv", lambda mime: mime == "application/pdf"),
}


@dataclass(frozen=True)
class PendingUpload:
    """A validated file part that has not been written to disk yet."""

    rule: UploadRule
    upload: UploadFile
    size: int


@dataclass(frozen=True)
class StoredUpload:
    field: str
    filename: str
    path: Path


def _measure(upload: UploadFile) -> int:
    stream = upload.file
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def _is_empty_part(upload: UploadFile, size: int) -> bool:
    # Browsers submit an empty, unnamed part when no file was chosen.
    return not upload.filename and size == 0


def collect_uploads(form: FormData, *, max_bytes: int) -> dict[str, PendingUpload]:
    """Validate every file part of a multipart form.

    Accepts at most one ``image`` (any ``image/*`` type) and one ``cv``
    (``application/pdf``), each no larger than ``max_bytes``. Raises
    ``UploadRejectedError`` on the first offending part; nothing is written.
    """
    pending: dict[str, PendingUpload] = {}
    for field, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        size = _measure(value)
        if _is_empty_part(value, size):
            continue

        rule = UPLOAD_RULES.get(field)
        if rule is None:
            raise UploadRejectedError(f"Unexpected file field: {field}")
        if field in pending:
            raise UploadRejectedError(f"Only one file is allowed for field: {field}")

        content_type = (value.content_type or "").split(";", 1)[0].strip().lower()
        if not rule.accepts(content_type):
            raise UploadRejectedError("Invalid file type")
        if size > max_bytes:
            raise UploadRejectedError("File too large")

        pending[field] = PendingUpload(rule=rule, upload=value, size=size)
    return pending


def _extension(original_name: str | None) -> str:
    ext = os.path.splitext(os.path.basename(original_name or ""))[1]
    return ext if _EXTENSION_RE.match(ext) else ""


def generate_filename(prefix: str, original_name: str | None) -> str:
    """``<prefix>-<epoch millis>-<random>.<ext>``, keeping the client's extension."""
    timestamp = int(time.time() * 1000)
    suffix = random.randint(0, 10**9)
    return f"{prefix}-{timestamp}-{suffix}{_extension(original_name)}"


def _write_exclusive(pending: PendingUpload, upload_dir: Path) -> StoredUpload:
    for _ in range(_MAX_NAME_ATTEMPTS):
        filename = generate_filename(pending.rule.prefix, pending.upload.filename)
        path = upload_dir / filename
        try:
            with path.open("xb") as out:
                pending.upload.file.seek(0)
                shutil.copyfileobj(pending.upload.file, out)
        except FileExistsError:
            continue
        return StoredUpload(field=pending.rule.field, filename=filename, path=path)
    raise ServerError("Could not allocate a unique upload filename")


def save_uploads(pending: dict[str, PendingUpload], upload_dir: str | Path) -> dict[str, StoredUpload]:
    """Write validated uploads under ``upload_dir``, creating it on first use.

    If any write fails, files already written by this call are removed.
    """
    if not pending:
        return {}

    target = Path(upload_dir)
    stored: dict[str, StoredUpload] = {}
    try:
        target.mkdir(parents=True, exist_ok=True)
        for field, item in pending.items():
            stored[field] = _write_exclusive(item, target)
            logger.info("Stored %s upload as %s (%d bytes)", field, stored[field].filename, item.size)
    except OSError as exc:
        discard_uploads(stored.values())
        raise ServerError() from exc
    except ServerError:
        discard_uploads(stored.values())
        raise
    return stored


def discard_uploads(stored: Iterable[StoredUpload]) -> None:
    for item in stored:
        try:
            item.path.unlink(missing_ok=True)
            logger.info("Removed unreferenced upload %s", item.filename)
        except OSError:
            logger.exception("Failed to remove unreferenced upload %s", item.filename)
