"""
Role router: choose which navigation tree a session may see.
"""

import enum
from typing import Any, Dict, Optional, Tuple


class NavigationTree(str, enum.Enum):
    """Disjoint navigation trees; exactly one is active per session."""

    ADMIN = "admin"
    MANAGER = "manager"
    PLAYER = "player"
    GUEST = "guest"


_TREE_BY_ROLE = {
    "admin": NavigationTree.ADMIN,
    "manager": NavigationTree.MANAGER,
    "player": NavigationTree.PLAYER,
}

# Screens reachable from each tree; shared screens appear in several trees
_SHARED_SCREENS = (
    "Profile",
    "EditProfile",
    "Events",
    "EventDetails",
    "News",
    "NewsDetails",
    "Teams",
    "TeamDetails",
    "Players",
    "PlayerDetails",
    "RegisterTeam",
)

SCREENS_BY_TREE: Dict[NavigationTree, Tuple[str, ...]] = {
    NavigationTree.ADMIN: (
        "AdminDashboard",
        "CreateEvent",
        "CreateNews",
        "ManageTeams",
        "ManagePlayers",
    ) + _SHARED_SCREENS,
    NavigationTree.MANAGER: (
        "ManagerDashboard",
        "TeamManagement",
        "PlayerManagement",
        "CreateEvent",
        "CreateNews",
    ) + _SHARED_SCREENS,
    NavigationTree.PLAYER: _SHARED_SCREENS,
    NavigationTree.GUEST: ("Login", "Register", "ForgotPassword"),
}


def select_navigation_tree(identity: Optional[Any], role: Optional[Any]) -> NavigationTree:
    """
    Map (identity, role) to a navigation tree.

    Never raises; anything other than a signed-in admin, manager or player
    gets the guest tree.
    """
    if isinstance(role, enum.Enum):
        role = role.value
    if identity is None or not isinstance(role, str):
        return NavigationTree.GUEST
    return _TREE_BY_ROLE.get(role, NavigationTree.GUEST)


def available_screens(tree: NavigationTree) -> Tuple[str, ...]:
    """Screen names reachable in a navigation tree."""
    return SCREENS_BY_TREE[tree]
