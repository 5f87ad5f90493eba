"""
User service layer for identity accounts and club profiles.
"""

from typing import Optional, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from clubhouse.database.models import (
    User,
    UserProfile,
    UserRole,
    ProfileStatus,
)
from clubhouse.services import auth_service
from clubhouse.utils.constants import MIN_PASSWORD_LENGTH
from clubhouse.utils.datetime_utils import isoformat_or_none
import logging

logger = logging.getLogger(__name__)

VALID_ROLES = {role.value for role in UserRole}


async def create_user(session: AsyncSession, email: str, password_hash: str) -> int:
    """
    Create a new identity account.

    Args:
        session: Database session
        email: Normalized email address
        password_hash: Required hashed password

    Returns:
        User ID of the created user

    Raises:
        ValueError: If the email is already registered
    """
    result = await session.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValueError(f"Email {email} is already registered")

    new_user = User(email=email, password_hash=password_hash)
    session.add(new_user)
    await session.flush()
    return new_user.id


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[Dict]:
    """
    Get an identity account by email address, including its password hash.

    Args:
        session: Database session
        email: Email address (normalized to lowercase before lookup)

    Returns:
        User dictionary or None if not found
    """
    email = email.strip().lower() if email else None
    if not email:
        return None

    result = await session.execute(
        select(User).where(func.lower(User.email) == email).limit(1)
    )
    user = result.scalar_one_or_none()
    if user is None:
        return None
    return {
        "id": user.id,
        "email": user.email,
        "password_hash": user.password_hash,
        "created_at": isoformat_or_none(user.created_at),
    }


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get an identity account by id, joined with its profile role.

    The role is None while the profile document does not exist yet.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User dictionary or None if not found
    """
    result = await session.execute(
        select(User, UserProfile)
        .outerjoin(UserProfile, UserProfile.id == User.id)
        .where(User.id == user_id)
    )
    row = result.first()
    if row is None:
        return None
    user, profile = row
    return {
        "id": user.id,
        "email": user.email,
        "role": profile.role if profile else None,
        "team_id": profile.team_id if profile else None,
        "created_at": isoformat_or_none(user.created_at),
    }


def profile_to_dict(profile: UserProfile) -> Dict:
    """Convert a UserProfile row into the API/document representation."""
    return {
        "id": profile.id,
        "email": profile.email,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "full_name": profile.full_name,
        "role": profile.role,
        "status": profile.status,
        "team_id": profile.team_id,
        "team_name": profile.team_name,
        "created_at": isoformat_or_none(profile.created_at),
        "updated_at": isoformat_or_none(profile.updated_at),
    }


async def create_profile(
    session: AsyncSession,
    user_id: int,
    email: str,
    first_name: str,
    last_name: str,
    role: str,
    status: Optional[str] = None,
) -> Dict:
    """
    Create the club profile for an identity.

    Players start in ``pending_team_approval``; every other role starts active.

    Raises:
        ValueError: If the role is unknown, names are blank or a profile exists
    """
    if role not in VALID_ROLES:
        raise ValueError(f"Invalid role: {role}")
    if not first_name or not first_name.strip() or not last_name or not last_name.strip():
        raise ValueError("First and last name are required")

    existing = await session.get(UserProfile, user_id)
    if existing is not None:
        raise ValueError("Profile already exists for this user")

    if status is None:
        status = (
            ProfileStatus.PENDING_TEAM_APPROVAL.value
            if role == UserRole.PLAYER.value
            else ProfileStatus.ACTIVE.value
        )

    profile = UserProfile(
        id=user_id,
        email=email,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        role=role,
        status=status,
    )
    session.add(profile)
    await session.flush()
    await session.refresh(profile)
    return profile_to_dict(profile)


async def get_profile(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get a user's club profile.

    Args:
        session: Database session
        user_id: Identity/profile id

    Returns:
        Profile dictionary or None if the profile does not exist
    """
    result = await session.execute(select(UserProfile).where(UserProfile.id == user_id))
    profile = result.scalar_one_or_none()
    return profile_to_dict(profile) if profile else None


async def update_profile(
    session: AsyncSession,
    user_id: int,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> Optional[Dict]:
    """
    Update the editable profile fields (names only; role is immutable).

    Returns:
        Updated profile dictionary, or None if the profile does not exist
    """
    result = await session.execute(select(UserProfile).where(UserProfile.id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        return None

    if first_name is not None:
        if not first_name.strip():
            raise ValueError("First name cannot be blank")
        profile.first_name = first_name.strip()
    if last_name is not None:
        if not last_name.strip():
            raise ValueError("Last name cannot be blank")
        profile.last_name = last_name.strip()

    await session.flush()
    await session.refresh(profile)
    return profile_to_dict(profile)


async def register_user(
    session: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str,
    team_id: Optional[int] = None,
) -> Dict:
    """
    Register an identity and its profile in one unit of work.

    A player who picked a team at sign-up gets a pending join request for it.

    Args:
        session: Database session
        email: Email address
        password: Plaintext password
        first_name: First name
        last_name: Last name
        role: Requested role
        team_id: Optional team a player wants to join

    Returns:
        Dict with "profile" and "join_request" (None when no team was chosen)

    Raises:
        ValueError: On invalid input, duplicate email or a failed join precondition
    """
    # Imported here to avoid a circular import (membership_service uses profiles)
    from clubhouse.services import membership_service

    email = auth_service.normalize_email(email)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if team_id is not None and role != UserRole.PLAYER.value:
        raise ValueError("Only players can request to join a team at registration")

    user_id = await create_user(session, email, auth_service.hash_password(password))
    profile = await create_profile(session, user_id, email, first_name, last_name, role)

    join_request = None
    if team_id is not None:
        join_request = await membership_service.create_join_request(session, user_id, team_id)

    logger.info(f"Registered user {user_id} as {role}")
    return {"profile": profile, "join_request": join_request}
