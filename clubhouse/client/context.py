"""
Session context passed explicitly to screens instead of app-wide globals.
"""

from typing import Callable, Optional

from clubhouse.client.bootstrap import SessionBootstrapper, SessionSnapshot
from clubhouse.client.identity import IdentityProvider
from clubhouse.client.navigation import NavigationTree
from clubhouse.client.retry import RetryPolicy
from clubhouse.client.role_resolver import ProfileReader, RoleResolver


class SessionContext:
    """
    Owns one identity provider, role resolver and bootstrapper.

    Usage:
        async with create_session_context() as ctx:
            await ctx.identity_provider.sign_in(email, password)
            snapshot = await ctx.bootstrapper.wait_until_ready()
            tree = ctx.navigation_tree
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        role_resolver: RoleResolver,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ):
        self.identity_provider = identity_provider
        self.role_resolver = role_resolver
        self.bootstrapper = SessionBootstrapper(identity_provider, role_resolver, on_error=on_error)

    @property
    def snapshot(self) -> SessionSnapshot:
        return self.bootstrapper.snapshot

    @property
    def navigation_tree(self) -> Optional[NavigationTree]:
        return self.bootstrapper.snapshot.navigation_tree

    async def __aenter__(self) -> "SessionContext":
        self.bootstrapper.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.bootstrapper.close()


def create_session_context(
    session_factory=None,
    profile_reader: Optional[ProfileReader] = None,
    retry_policy: Optional[RetryPolicy] = None,
    on_error: Optional[Callable[[BaseException], None]] = None,
) -> SessionContext:
    """
    Build a session context wired to the database (or injected collaborators).

    Args:
        session_factory: Optional async session factory for the identity provider
        profile_reader: Optional profile reader for role lookups
        retry_policy: Optional retry policy for role lookups
        on_error: Optional callback for recovered role-lookup failures

    Returns:
        A SessionContext; use it as an async context manager
    """
    return SessionContext(
        IdentityProvider(session_factory=session_factory),
        RoleResolver(profile_reader=profile_reader, retry_policy=retry_policy),
        on_error=on_error,
    )
