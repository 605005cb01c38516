# schema_migration.py
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from user_registration.database import Base


class SchemaMigration(Base):
    __tablename__ = "schema_migrations"

    version = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)
    applied_at = Column(DateTime, server_default=func.now(), nullable=False)
