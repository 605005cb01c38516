# __init__.py
from user_registration.schemas.health import DBHealthStatus, HealthStatus
from user_registration.schemas.user import (
	DashboardResponse,
	ErrorResponse,
	LoginRequest,
	LoginResponse,
	RegisterResponse,
	RegistrationForm,
	UserRead,
)

__all__ = [
	"DashboardResponse",
	"DBHealthStatus",
	"ErrorResponse",
	"HealthStatus",
	"LoginRequest",
	"LoginResponse",
	"RegisterResponse",
	"RegistrationForm",
	"UserRead",
]
