# auth.py
import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from user_registration.config import Settings
from user_registration.errors import AuthenticationError, InvalidInputError
from user_registration.routers.dependencies import get_app_settings, get_user_store
from user_registration.schemas.user import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    RegisterResponse,
    RegistrationForm,
    UserRead,
)
from user_registration.services.registration_service import complete_registration
from user_registration.services.upload_service import collect_uploads
from user_registration.services.user_store import UserStore
from user_registration.utils.password_hash import burn_verification, verify_password


router = APIRouter()

logger = logging.getLogger(__name__)

_REGISTRATION_TEXT_FIELDS = ("fullname", "email", "password", "age", "gender")
_REQUIRED_FIELDS = ("fullname", "email", "password")


def _first_error_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    message = str(errors[0].get("msg") or "Invalid request")
    return message.removeprefix("Value error, ")


def _parse_registration_form(fields: dict[str, str]) -> RegistrationForm:
    if any(not (fields.get(name) or "").strip() for name in _REQUIRED_FIELDS):
        raise InvalidInputError("Full name, email, and password are required")
    try:
        return RegistrationForm(**fields)
    except ValidationError as exc:
        raise InvalidInputError(_first_error_message(exc)) from exc


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def register_user(
    request: Request,
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> RegisterResponse:
    form = await request.form()
    try:
        # File filtering comes first: a rejected part fails the request before any field checks.
        uploads = collect_uploads(form, max_bytes=settings.max_upload_bytes)

        fields = {name: form.get(name) for name in _REGISTRATION_TEXT_FIELDS}
        fields = {name: value for name, value in fields.items() if isinstance(value, str)}
        registration = _parse_registration_form(fields)

        user_id = await run_in_threadpool(
            complete_registration,
            store,
            registration,
            uploads,
            upload_dir=settings.upload_dir,
            bcrypt_rounds=settings.bcrypt_rounds,
        )
    finally:
        await form.close()

    logger.info("Registered user id=%s email=%s", user_id, registration.email)
    return RegisterResponse(message="User registered successfully", user_id=user_id)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def login_user(
    payload: LoginRequest,
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> LoginResponse:
    email = (payload.email or "").strip().lower()
    password = payload.password or ""
    if not email or not password:
        raise InvalidInputError("Email and password are required")

    user = store.find_by_email(email)
    if user is None:
        # Same bcrypt cost as a real check so timing does not reveal unknown emails.
        burn_verification(password, rounds=settings.bcrypt_rounds)
        logger.info("Login failed for %s", email)
        raise AuthenticationError("Invalid email or password")
    if not verify_password(password, user.password):
        logger.info("Login failed for %s", email)
        raise AuthenticationError("Invalid email or password")

    logger.info("Login succeeded for user id=%s", user.id)
    return LoginResponse(message="Login successful", user=UserRead.model_validate(user))
