"""
SQLAlchemy ORM models for the Clubhouse club-management system.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from clubhouse.database.db import Base


class UserRole(str, enum.Enum):
    """Application role stored on a user profile."""

    ADMIN = "admin"
    MANAGER = "manager"
    PLAYER = "player"
    GUEST = "guest"


class ProfileStatus(str, enum.Enum):
    """User profile status enum."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING_TEAM_APPROVAL = "pending_team_approval"


class TeamStatus(str, enum.Enum):
    """Team registration status enum."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TeamRequestType(str, enum.Enum):
    """Who initiated a team request."""

    JOIN = "join"  # player asks to join
    INVITATION = "invitation"  # manager invites a player


class TeamRequestStatus(str, enum.Enum):
    """Team request status enum."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class User(Base):
    """Identity accounts with email/password authentication."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    profile = relationship("UserProfile", back_populates="user", uselist=False)

    __table_args__ = (Index("idx_users_email", "email"),)


class UserProfile(Base):
    """Club profile for an identity (same id as the owning user)."""

    __tablename__ = "user_profiles"

    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    email = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.PLAYER.value)
    status = Column(String(30), nullable=False, default=ProfileStatus.ACTIVE.value)
    # Weak back-reference; roster membership lives on team_players
    team_id = Column(
        Integer,
        ForeignKey("teams.id", ondelete="SET NULL", use_alter=True, name="fk_user_profiles_team"),
        nullable=True,
    )
    team_name = Column(String, nullable=True)  # Denormalized cache of Team.name
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="profile")
    team = relationship("Team", foreign_keys=[team_id])

    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'manager', 'player', 'guest')", name="ck_user_profiles_role"
        ),
        CheckConstraint(
            "status IN ('active', 'inactive', 'pending_team_approval')",
            name="ck_user_profiles_status",
        ),
        Index("idx_user_profiles_role", "role"),
        Index("idx_user_profiles_team", "team_id"),
        Index("idx_user_profiles_first_name", "first_name"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Team(Base):
    """Teams registered by managers and reviewed by admins."""

    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    club = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    manager_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False)
    status = Column(String(20), nullable=False, default=TeamStatus.PENDING.value)
    max_players = Column(Integer, nullable=True)  # None means no capacity bound
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    manager = relationship("UserProfile", foreign_keys=[manager_id])
    roster = relationship(
        "TeamPlayer",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamPlayer.id",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_teams_status"
        ),
        CheckConstraint(
            "max_players IS NULL OR max_players > 0", name="ck_teams_max_players"
        ),
        Index("idx_teams_name", "name"),
        Index("idx_teams_status_name", "status", "name"),
        Index("idx_teams_manager", "manager_id"),
    )


class TeamPlayer(Base):
    """Join table (Team ↔ UserProfile). The set of rows for a team is its roster."""

    __tablename__ = "team_players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    player_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    team = relationship("Team", back_populates="roster")
    player = relationship("UserProfile", foreign_keys=[player_id])

    __table_args__ = (
        UniqueConstraint("team_id", "player_id", name="uq_team_players_team_player"),
        Index("idx_team_players_team", "team_id"),
        Index("idx_team_players_player", "player_id"),
    )


class TeamRequest(Base):
    """Join requests and invitations. Never deleted; terminal once not pending."""

    __tablename__ = "team_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False)
    # Null once the team is deleted; the request stays as an audit record
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    manager_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=True)
    type = Column(String(20), nullable=False, default=TeamRequestType.JOIN.value)
    status = Column(String(20), nullable=False, default=TeamRequestStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    responded_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    player = relationship("UserProfile", foreign_keys=[player_id])
    team = relationship("Team", foreign_keys=[team_id])

    __table_args__ = (
        CheckConstraint("type IN ('join', 'invitation')", name="ck_team_requests_type"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_team_requests_status"
        ),
        Index("idx_team_requests_team_status", "team_id", "status"),
        Index("idx_team_requests_player_status", "player_id", "status"),
    )


class Event(Base):
    """Club events (tournaments, trainings, socials)."""

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    registration_deadline = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Integer, ForeignKey("user_profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_events_date", "date"),)


class NewsArticle(Base):
    """News articles published by admins and managers."""

    __tablename__ = "news"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    author = Column(String, nullable=True)  # Display name/email at publish time
    created_by = Column(Integer, ForeignKey("user_profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_news_created_at", "created_at"),)
