# health.py
from datetime import datetime

from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime


class DBHealthStatus(BaseModel):
    database: str
    db_url: str
    timestamp: datetime
