"""
Session bootstrapper: turns identity-change events into one consistent
(identity, role) snapshot per transition.

    INITIALIZING -> RESOLVING(identity) -> READY(identity, role)
    INITIALIZING -> READY(None, guest)          (signed out)

Every identity change bumps a generation counter. A role lookup still in
flight when a newer change arrives is left to finish, but its result is
dropped, so a slow lookup for an earlier sign-in can never overwrite the
current one.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from clubhouse.client.identity import Identity, IdentityProvider
from clubhouse.client.navigation import NavigationTree, select_navigation_tree
from clubhouse.client.role_resolver import RoleResolver
from clubhouse.utils.constants import DEFAULT_SIGNED_IN_ROLE

logger = logging.getLogger(__name__)

GUEST_ROLE = "guest"


class SessionState(str, enum.Enum):
    """Bootstrap state; the UI shows a loading indicator until READY."""

    INITIALIZING = "initializing"
    RESOLVING = "resolving"
    READY = "ready"


@dataclass(frozen=True)
class SessionSnapshot:
    """What the presentation layer renders from."""

    state: SessionState
    identity: Optional[Identity] = None
    role: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def is_loading(self) -> bool:
        return self.state != SessionState.READY

    @property
    def navigation_tree(self) -> Optional[NavigationTree]:
        """Active tree once READY, None while loading."""
        if self.is_loading:
            return None
        return select_navigation_tree(self.identity, self.role)


SnapshotListener = Callable[[SessionSnapshot], None]


class SessionBootstrapper:
    """Consume identity changes and resolve roles for them."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        role_resolver: RoleResolver,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ):
        self._identity_provider = identity_provider
        self._role_resolver = role_resolver
        self._on_error = on_error
        self._snapshot = SessionSnapshot(SessionState.INITIALIZING)
        self._generation = 0
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[SnapshotListener] = []
        self._ready = asyncio.Event()

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    def start(self) -> None:
        """
        Subscribe to identity changes. Must be called from a running event loop.
        """
        if self._unsubscribe is None:
            self._unsubscribe = self._identity_provider.on_identity_change(
                self._handle_identity_change
            )
            logger.debug("Session bootstrapper started")

    def close(self) -> None:
        """Detach from the identity provider and cancel outstanding lookups."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        # Anything still running is stale from now on
        self._generation += 1
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        logger.debug("Session bootstrapper closed")

    def add_listener(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def wait_until_ready(self) -> SessionSnapshot:
        """Wait until the current transition reaches READY."""
        while True:
            await self._ready.wait()
            if self._snapshot.state == SessionState.READY:
                return self._snapshot

    def _handle_identity_change(self, identity: Optional[Identity]) -> None:
        self._generation += 1
        generation = self._generation

        if identity is None:
            self._publish(SessionSnapshot(SessionState.READY, None, GUEST_ROLE))
            return

        self._publish(SessionSnapshot(SessionState.RESOLVING, identity))
        task = asyncio.get_running_loop().create_task(self._resolve(identity, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _resolve(self, identity: Identity, generation: int) -> None:
        try:
            role = await self._role_resolver.resolve_role(identity.id)
        except Exception as e:
            if generation != self._generation:
                logger.debug(f"Discarding stale role lookup failure for identity {identity.id}")
                return
            logger.error(f"Failed to resolve role for identity {identity.id}: {e}", exc_info=True)
            if self._on_error is not None:
                self._on_error(e)
            self._publish(SessionSnapshot(SessionState.READY, identity, None, error=e))
            return

        if generation != self._generation:
            logger.debug(f"Discarding stale role '{role}' for identity {identity.id}")
            return

        # No profile yet means registration is still writing it
        if role is None:
            role = DEFAULT_SIGNED_IN_ROLE
        self._publish(SessionSnapshot(SessionState.READY, identity, role))

    def _publish(self, snapshot: SessionSnapshot) -> None:
        self._snapshot = snapshot
        if snapshot.state == SessionState.READY:
            self._ready.set()
        else:
            self._ready.clear()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Session listener failed: {e}", exc_info=True)
