"""
Role resolver: map a signed-in identity to its application role by reading
the user's profile, retrying while the backend is unavailable.
"""

import logging
from typing import Awaitable, Callable, Dict, Optional

from clubhouse.client.retry import RetryExhaustedError, RetryPolicy
from clubhouse.database import db
from clubhouse.services import user_service
from clubhouse.utils.constants import ROLE_FETCH_MAX_ATTEMPTS, ROLE_FETCH_RETRY_DELAY_SECONDS

logger = logging.getLogger(__name__)

ProfileReader = Callable[[int], Awaitable[Optional[Dict]]]


class RoleResolutionTimeout(RuntimeError):
    """Raised when the profile could not be read because the backend stayed unavailable."""


async def read_profile(identity_id: int) -> Optional[Dict]:
    """Read a profile in a short-lived database session."""
    async with db.AsyncSessionLocal() as session:
        return await user_service.get_profile(session, identity_id)


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=ROLE_FETCH_MAX_ATTEMPTS,
        delay_seconds=ROLE_FETCH_RETRY_DELAY_SECONDS,
    )


class RoleResolver:
    """Resolve an identity id to a role; read-only."""

    def __init__(
        self,
        profile_reader: Optional[ProfileReader] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self._read_profile = profile_reader or read_profile
        self._retry_policy = retry_policy or default_retry_policy()

    async def resolve_role(self, identity_id: int) -> Optional[str]:
        """
        Resolve the role stored on the identity's profile.

        Args:
            identity_id: Identity (and profile) id

        Returns:
            The profile's role, or None when no profile exists

        Raises:
            RoleResolutionTimeout: If every attempt hit a transient backend error
            Exception: Any non-transient backend error, unchanged
        """
        try:
            profile = await self._retry_policy.run(lambda: self._read_profile(identity_id))
        except RetryExhaustedError as e:
            raise RoleResolutionTimeout(
                f"Could not read role for identity {identity_id} after {e.attempts} attempts"
            ) from e.last_error

        if profile is None:
            return None
        return profile.get("role")
