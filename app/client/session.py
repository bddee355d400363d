# app/client/session.py
import logging
from typing import Optional

from app.core.exceptions import AuthorizationError
from .api import HoardingApi
from .models import User

logger = logging.getLogger(__name__)

AUTHORIZED_ROLE = "authorized"


class AuthSession:
    """Who is using the client and what they may do.

    Starts logged out. ``login``/``register`` populate the token and user and
    hand the token to the API wrapper; ``logout`` clears both.
    """

    def __init__(self, api: HoardingApi):
        self.api = api
        self.token: Optional[str] = None
        self.user: Optional[User] = None

    @property
    def is_logged_in(self) -> bool:
        return self.token is not None

    @property
    def role(self) -> Optional[str]:
        return self.user.role if self.user else None

    @property
    def can_add_listings(self) -> bool:
        return self.is_logged_in and self.role == AUTHORIZED_ROLE

    def _start(self, result) -> User:
        self.token = result.token
        self.user = result.user
        self.api.token = result.token
        logger.info("Session started for %s (%s)", result.user.email, result.user.role)
        return result.user

    def login(self, email: str, password: str) -> User:
        return self._start(self.api.login(email, password))

    def register(self, email: str, password: str, role: str) -> User:
        return self._start(self.api.register(email, password, role))

    def logout(self) -> None:
        self.token = None
        self.user = None
        self.api.token = None
        logger.info("Session ended")

    def require_add_capability(self) -> None:
        if not self.is_logged_in:
            raise AuthorizationError("Please log in to add hoardings")
        if not self.can_add_listings:
            raise AuthorizationError("Only authorized users can add hoardings")
