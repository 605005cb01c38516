# dashboard.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from user_registration.errors import AuthenticationError, NotFoundError
from user_registration.routers.dependencies import get_user_store
from user_registration.schemas.user import DashboardResponse, ErrorResponse
from user_registration.services.user_store import UserStore


# Largest value a signed 64-bit id column can hold.
MAX_USER_ID = 2**63 - 1

router = APIRouter()


# NOTE: userId is a plain identifier, not a credential. Anyone who knows an id can read
# that profile; this endpoint has no session or token check.
@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def read_dashboard(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    store: UserStore = Depends(get_user_store),
) -> DashboardResponse:
    if not user_id or not user_id.strip():
        raise AuthenticationError("User ID required")
    try:
        lookup_id = int(user_id.strip())
    except ValueError as exc:
        # A non-numeric id cannot match any row.
        raise NotFoundError("User not found") from exc
    if not 1 <= lookup_id <= MAX_USER_ID:
        # Outside the INTEGER id range; no row can match.
        raise NotFoundError("User not found")

    user = store.find_by_id(lookup_id)
    if user is None:
        raise NotFoundError("User not found")
    return DashboardResponse(user=user)
