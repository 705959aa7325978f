"""Session store: the single writer of the authenticated identity and token."""

from __future__ import annotations

import logging
from typing import Callable

from jwt_pizza.api import PizzaService
from jwt_pizza.config import DB_PATH
from jwt_pizza.errors import ApiError, AuthError
from jwt_pizza.models import User
from jwt_pizza.persistence import clear_token, load_token, save_token

logger = logging.getLogger(__name__)

SessionListener = Callable[[User | None], None]

REJECTED_TOKEN_STATUSES = (401, 403)


def initials(name: str) -> str:
    """First letters of the first two words of a name, uppercased."""
    words = [word for word in name.split(" ") if word]
    return "".join(word[0] for word in words[:2]).upper()


class SessionStore:
    """Holds the current user and bearer token and tells readers when they change."""

    def __init__(self, service: PizzaService, db_path: str = DB_PATH) -> None:
        self.service = service
        self.db_path = db_path
        self.user: User | None = None
        self.token: str | None = None
        self._listeners: list[SessionListener] = []

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None

    def current_token(self) -> str | None:
        return self.token

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.user)

    def _establish(self, user: User, token: str) -> None:
        self.user = user
        self.token = token
        save_token(token, self.db_path)
        self._notify()

    def _reset(self) -> None:
        self.user = None
        self.token = None
        clear_token(self.db_path)
        self._notify()

    async def login(self, email: str, password: str) -> User:
        try:
            user, token = await self.service.login(email, password)
        except ApiError as exc:
            logger.debug("login_failed email=%r status=%s", email, exc.status)
            raise AuthError(exc.message) from exc
        self._establish(user, token)
        logger.debug("login_ok user_id=%s", user.id)
        return user

    async def register(self, name: str, email: str, password: str) -> User:
        try:
            user, token = await self.service.register(name, email, password)
        except ApiError as exc:
            logger.debug("register_failed email=%r status=%s", email, exc.status)
            raise AuthError(exc.message) from exc
        self._establish(user, token)
        logger.debug("register_ok user_id=%s", user.id)
        return user

    async def logout(self) -> None:
        stale_token = self.token
        self._reset()
        if stale_token is None:
            return
        try:
            message = await self.service.logout(token=stale_token)
        except ApiError as exc:
            # The local session is already gone; the server reply is informational.
            logger.warning("logout_server_error status=%s message=%r", exc.status, exc.message)
            return
        logger.debug("logout_ok message=%r", message)

    async def restore(self) -> User | None:
        """Re-establish the session from the persisted token, if it is still valid."""
        token = load_token(self.db_path)
        if token is None:
            return None

        self.token = token
        try:
            user = await self.service.get_me()
        except ApiError as exc:
            if exc.status not in REJECTED_TOKEN_STATUSES:
                # Server unreachable or failing: keep the saved token for the next start.
                logger.warning("restore_unavailable status=%s message=%r", exc.status, exc.message)
                self.token = None
                return None
            logger.debug("restore_rejected status=%s", exc.status)
            user = None

        if user is None:
            logger.debug("restore_stale_token")
            self._reset()
            return None

        self.user = user
        self._notify()
        logger.debug("restore_ok user_id=%s", user.id)
        return user

    async def update_user(self, name: str, email: str, password: str | None = None) -> User:
        if self.user is None:
            raise AuthError("Log in to edit your profile")
        try:
            user, token = await self.service.update_user(self.user.id, name, email, password)
        except ApiError as exc:
            raise AuthError(exc.message) from exc
        self._establish(user, token or self.token or "")
        return user
