"""Parameterized persistence for ``users`` records.

``UserStore`` owns the process-wide SQLAlchemy engine. It is built once by the
application factory and handed to request handlers through a dependency, so
tests can point it at a throwaway database.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from user_registration.database import create_db_engine
from user_registration.errors import DuplicateEmailError, StoreError
from user_registration.models.user import User
from user_registration.schemas.user import UserRead


logger = logging.getLogger(__name__)

# MySQL ER_DUP_ENTRY
_MYSQL_DUPLICATE_ENTRY = 1062

_PROJECTED_COLUMNS = (
    User.id,
    User.fullname,
    User.email,
    User.age,
    User.gender,
    User.profile_image,
    User.cv_filename,
    User.reg_date,
)


def _is_duplicate_email(exc: IntegrityError) -> bool:
    orig = exc.orig
    args = getattr(orig, "args", ()) or ()
    if args and args[0] == _MYSQL_DUPLICATE_ENTRY:
        return "email" in str(orig).lower()
    message = str(orig)
    return "UNIQUE constraint failed" in message and "users.email" in message


class UserStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)

    @classmethod
    def from_url(cls, db_url: str) -> "UserStore":
        return cls(create_db_engine(db_url))

    def close(self) -> None:
        self.engine.dispose()

    def insert(
        self,
        *,
        fullname: str,
        email: str,
        password_hash: str,
        age: Optional[int] = None,
        gender: Optional[str] = None,
        profile_image: Optional[str] = None,
        cv_filename: Optional[str] = None,
    ) -> int:
        """Insert a user and return its id.

        The ``email`` uniqueness constraint is the only duplicate check; a
        violation surfaces as ``DuplicateEmailError``.
        """
        user = User(
            fullname=fullname,
            email=email,
            password=password_hash,
            age=age,
            gender=gender,
            profile_image=profile_image,
            cv_filename=cv_filename,
        )
        with self._session_factory() as session:
            try:
                session.add(user)
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if _is_duplicate_email(exc):
                    raise DuplicateEmailError() from exc
                raise StoreError() from exc
            except SQLAlchemyError as exc:
                session.rollback()
                raise StoreError() from exc
            logger.info("Inserted user id=%s", user.id)
            return int(user.id)

    def find_by_email(self, email: str) -> Optional[User]:
        """Full record, password hash included; only for credential checks."""
        try:
            with self._session_factory() as session:
                return session.execute(select(User).where(User.email == email)).scalars().first()
        except SQLAlchemyError as exc:
            raise StoreError() from exc

    def find_by_id(self, user_id: int) -> Optional[UserRead]:
        try:
            with self._session_factory() as session:
                row = session.execute(select(*_PROJECTED_COLUMNS).where(User.id == user_id)).first()
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        if row is None:
            return None
        return UserRead.model_validate(dict(row._mapping))

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True
