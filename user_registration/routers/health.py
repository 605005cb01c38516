# health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status

from user_registration.config import Settings, build_sqlalchemy_db_url
from user_registration.database import mask_db_url
from user_registration.routers.dependencies import get_app_settings, get_user_store
from user_registration.schemas.health import DBHealthStatus, HealthStatus
from user_registration.services.user_store import UserStore


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthStatus, summary="API heartbeat")
def health_check() -> HealthStatus:
    return HealthStatus(status="ok", timestamp=datetime.now(timezone.utc))


@router.get("/db", response_model=DBHealthStatus, summary="DB connectivity check")
def db_health_check(
    response: Response,
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> DBHealthStatus:
    ok = store.ping()
    if not ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return DBHealthStatus(
        database="ok" if ok else "error",
        db_url=mask_db_url(build_sqlalchemy_db_url(settings)),
        timestamp=datetime.now(timezone.utc),
    )
