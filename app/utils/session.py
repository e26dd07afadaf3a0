"""Session helpers"""
import time
from typing import Any

from fastapi import Request


def get_session_value(request: Request, key: str, default: Any = None) -> Any:
    return request.session.get(key, default)


def is_authenticated(request: Request) -> bool:
    return get_session_value(request, "user_id") is not None


def get_current_user_id(request: Request) -> int | None:
    """Signed-in user's users.user_id, or None"""
    return get_session_value(request, "user_id")


def login_user(request: Request, user_id: int, **kwargs: Any) -> None:
    """
    Store the user in the session cookie.

    Args:
        request: FastAPI Request
        user_id: users.user_id
        **kwargs: extra values to keep in the session
    """
    request.session["user_id"] = user_id
    request.session["authenticated"] = True
    request.session["login_time"] = time.time()

    for key, value in kwargs.items():
        request.session[key] = value


def logout_user(request: Request) -> None:
    request.session.clear()
