"""
Pydantic models for API request/response validation.
"""

from datetime import datetime
from typing import Dict, Optional, List
from pydantic import BaseModel, Field, model_validator


class RegisterRequest(BaseModel):
    """Request to create an account and club profile."""

    email: str
    password: str
    first_name: str
    last_name: str
    role: str = "player"
    team_id: Optional[int] = None

    @model_validator(mode="after")
    def validate_role(self):
        """Only players, managers and guests can self-register."""
        if self.role not in ("player", "manager", "guest"):
            raise ValueError("role must be one of player, manager or guest")
        return self


class LoginRequest(BaseModel):
    """Request to login with email and password."""

    email: str
    password: str


class ProfileResponse(BaseModel):
    """Club profile of a user."""

    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: str
    status: str
    team_id: Optional[int] = None
    team_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Request to update profile names. Role and team are not editable here."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None


class AuthResponse(BaseModel):
    """Authentication response with JWT token."""

    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: Optional[str] = None


class RegisterResponse(AuthResponse):
    """Registration response: token plus the created profile."""

    profile: ProfileResponse
    join_request_id: Optional[int] = None


class MeResponse(BaseModel):
    """Current identity with its profile (None while it is being written)."""

    id: int
    email: str
    role: Optional[str] = None
    profile: Optional[ProfileResponse] = None


class TeamCreate(BaseModel):
    """Request to register a team."""

    name: str
    club: str
    description: Optional[str] = None
    max_players: Optional[int] = Field(default=None, ge=1)


class TeamStatusUpdate(BaseModel):
    """Admin review decision for a team."""

    status: str = Field(pattern="^(pending|approved|rejected)$")


class TeamResponse(BaseModel):
    """Team with its roster ids."""

    id: int
    name: str
    club: str
    description: Optional[str] = None
    manager_id: int
    status: str
    max_players: Optional[int] = None
    players: List[int] = []
    player_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TeamListResponse(BaseModel):
    """One page of teams."""

    items: List[TeamResponse]
    next_cursor: Optional[str] = None


class PlayerListResponse(BaseModel):
    """One page of profiles."""

    items: List[ProfileResponse]
    next_cursor: Optional[str] = None


class JoinRequestCreate(BaseModel):
    """Request from the signed-in player to join a team."""

    team_id: int


class InvitationCreate(BaseModel):
    """Invitation from a team's manager to a player."""

    player_id: int


class TeamRequestResponse(BaseModel):
    """Join request or invitation."""

    id: int
    player_id: int
    team_id: Optional[int] = None
    manager_id: Optional[int] = None
    type: str
    status: str
    team_name: Optional[str] = None
    player_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    responded_at: Optional[str] = None


class EventCreate(BaseModel):
    """Request to create a club event."""

    title: str
    description: str
    date: datetime
    location: Optional[str] = None
    registration_deadline: Optional[datetime] = None


class EventResponse(BaseModel):
    """Club event."""

    id: int
    title: str
    description: str
    location: Optional[str] = None
    date: str
    registration_deadline: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[str] = None


class NewsCreate(BaseModel):
    """Request to publish a news article."""

    title: str
    content: str


class NewsResponse(BaseModel):
    """News article."""

    id: int
    title: str
    content: str
    author: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[str] = None


class DashboardStatsResponse(BaseModel):
    """Admin dashboard counts."""

    total_teams: int
    pending_teams: int
    total_players: int
    total_events: int
    teams_by_status: Dict[str, int]
    profiles_by_role: Dict[str, int]
