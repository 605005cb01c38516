# dependencies.py
from fastapi import Request

from user_registration.config import Settings
from user_registration.services.user_store import UserStore


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
