# hydroscan/domain/session.py
from dataclasses import dataclass

from hydroscan.domain.errors import NotLoggedIn


@dataclass(frozen=True)
class SessionContext:
    """Acting user supplied by the auth/session collaborator for a single call."""

    user_id: str | None = None

    @property
    def is_logged_in(self) -> bool:
        return bool(self.user_id and self.user_id.strip())

    def require_user(self) -> str:
        if not self.is_logged_in:
            raise NotLoggedIn()
        return self.user_id.strip()
