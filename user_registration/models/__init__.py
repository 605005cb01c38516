# __init__.py
from user_registration.models.schema_migration import SchemaMigration
from user_registration.models.user import GENDERS, User

__all__ = [
	"GENDERS",
	"SchemaMigration",
	"User",
]
