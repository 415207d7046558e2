# hydroscan/api/deps.py
from fastapi import Header

from hydroscan.domain.session import SessionContext


def get_session_context(x_user_id: str | None = Header(default=None)) -> SessionContext:
    # absent header is a valid input; services reject it with NotLoggedIn
    return SessionContext(user_id=x_user_id)
