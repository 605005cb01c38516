# user.py
from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.sql import func

from user_registration.database import Base


GENDERS = ("male", "female", "other")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    fullname = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    # bcrypt hash; plaintext never reaches this column.
    password = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
    gender = Column(Enum(*GENDERS, name="user_gender"), nullable=True)
    profile_image = Column(String(255), nullable=True)
    cv_filename = Column(String(255), nullable=True)
    reg_date = Column(DateTime, server_default=func.now(), nullable=False)
