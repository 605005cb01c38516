# registration_service.py
import logging

from user_registration.schemas.user import RegistrationForm
from user_registration.services.upload_service import (
    CV_FIELD,
    IMAGE_FIELD,
    PendingUpload,
    discard_uploads,
    save_uploads,
)
from user_registration.services.user_store import UserStore
from user_registration.utils.password_hash import hash_password


logger = logging.getLogger(__name__)


def complete_registration(
    store: UserStore,
    form: RegistrationForm,
    uploads: dict[str, PendingUpload],
    *,
    upload_dir: str,
    bcrypt_rounds: int,
) -> int:
    """Persist uploads, hash the password and insert the user; returns the new id.

    Files written here are removed again if anything after the write fails.
    """
    stored = save_uploads(uploads, upload_dir)
    try:
        password_hash = hash_password(form.password, rounds=bcrypt_rounds)
        image = stored.get(IMAGE_FIELD)
        cv = stored.get(CV_FIELD)
        return store.insert(
            fullname=form.fullname,
            email=form.email,
            password_hash=password_hash,
            age=form.age,
            gender=form.gender,
            profile_image=image.filename if image else None,
            cv_filename=cv.filename if cv else None,
        )
    except Exception:
        if stored:
            logger.info("Registration for %s failed after upload; removing %d file(s)", form.email, len(stored))
        discard_uploads(stored.values())
        raise
