"""
Identity provider adapter: sign-in, sign-out, registration and a stream of
identity-change notifications.

Subscribers are called immediately with the current identity (None when
signed out) and again on every change, so a consumer never has to poll.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from clubhouse.database import db
from clubhouse.services import auth_service, user_service
from clubhouse.utils.constants import MIN_PASSWORD_LENGTH

logger = logging.getLogger(__name__)


class InvalidCredentialsError(ValueError):
    """Raised when an email/password pair does not match an account."""


@dataclass(frozen=True)
class Identity:
    """An authenticated principal."""

    id: int
    email: str
    token: Optional[str] = None


IdentityListener = Callable[[Optional[Identity]], None]


class IdentityProvider:
    """Email/password identity provider backed by the users table."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory
        self._current: Optional[Identity] = None
        self._listeners: List[IdentityListener] = []

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._current

    def _sessions(self):
        # Resolved lazily so tests can swap db.AsyncSessionLocal
        return (self._session_factory or db.AsyncSessionLocal)()

    async def register(self, email: str, password: str) -> Identity:
        """
        Create an identity account and sign it in.

        Only the credentials are created; the club profile is written
        separately, so a listener may briefly see an identity with no profile.

        Raises:
            ValueError: If the email is invalid or taken, or the password is too short
        """
        email = auth_service.normalize_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        async with self._sessions() as session:
            user_id = await user_service.create_user(
                session, email, auth_service.hash_password(password)
            )
            await session.commit()

        logger.info(f"Registered identity {user_id}")
        return self._set_current(self._issue(user_id, email))

    async def sign_in(self, email: str, password: str) -> Identity:
        """
        Sign in with email and password.

        Raises:
            InvalidCredentialsError: If the account does not exist or the password is wrong
        """
        async with self._sessions() as session:
            user = await user_service.get_user_by_email(session, email)

        if user is None or not auth_service.verify_password(password, user["password_hash"]):
            raise InvalidCredentialsError("Email or password is incorrect")

        return self._set_current(self._issue(user["id"], user["email"]))

    async def sign_out(self) -> None:
        """Sign out the current identity (no-op when already signed out)."""
        if self._current is None:
            return
        self._set_current(None)

    def on_identity_change(self, callback: IdentityListener) -> Callable[[], None]:
        """
        Subscribe to identity changes.

        The callback fires right away with the current identity.

        Returns:
            Function that detaches the callback; calling it twice is harmless
        """
        self._listeners.append(callback)
        callback(self._current)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _issue(self, user_id: int, email: str) -> Identity:
        token = auth_service.create_access_token({"user_id": user_id, "email": email})
        return Identity(id=user_id, email=email, token=token)

    def _set_current(self, identity: Optional[Identity]) -> Optional[Identity]:
        self._current = identity
        for listener in list(self._listeners):
            try:
                listener(identity)
            except Exception as e:
                logger.error(f"Identity listener failed: {e}", exc_info=True)
        return identity
