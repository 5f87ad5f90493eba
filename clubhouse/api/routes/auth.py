"""Authentication and profile route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.api.routes import limiter, INVALID_CREDENTIALS_RESPONSE
from clubhouse.database.db import get_db_session
from clubhouse.services import auth_service, user_service
from clubhouse.services.errors import NotFoundError
from clubhouse.api.auth_dependencies import get_current_user
from clubhouse.models.schemas import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    AuthResponse,
    MeResponse,
    ProfileResponse,
    ProfileUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _issue_token(user_id: int, email: str) -> str:
    return auth_service.create_access_token(data={"user_id": user_id, "email": email})


@router.post("/api/auth/register", response_model=RegisterResponse)
@limiter.limit("10/minute")
async def register(
    request: Request, payload: RegisterRequest, session: AsyncSession = Depends(get_db_session)
):
    """
    Create credentials and a club profile in one step.

    Players may name a team; a pending join request is created for it.
    """
    try:
        result = await user_service.register_user(
            session,
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=payload.role,
            team_id=payload.team_id,
        )
        profile = result["profile"]
        join_request = result["join_request"]
        return RegisterResponse(
            access_token=_issue_token(profile["id"], profile["email"]),
            user_id=profile["id"],
            role=profile["role"],
            profile=profile,
            join_request_id=join_request["id"] if join_request else None,
        )
    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error during registration: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error during registration")


@router.post("/api/auth/login", response_model=AuthResponse)
@limiter.limit("10/minute")
async def login(
    request: Request, payload: LoginRequest, session: AsyncSession = Depends(get_db_session)
):
    """Login with email and password."""
    try:
        user = await user_service.get_user_by_email(session, payload.email)
        if not user:
            raise INVALID_CREDENTIALS_RESPONSE
        if not auth_service.verify_password(payload.password, user["password_hash"]):
            raise INVALID_CREDENTIALS_RESPONSE

        profile = await user_service.get_profile(session, user["id"])
        return AuthResponse(
            access_token=_issue_token(user["id"], user["email"]),
            user_id=user["id"],
            role=profile["role"] if profile else None,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during login: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error during login")


@router.get("/api/auth/me", response_model=MeResponse)
async def get_me(
    user: dict = Depends(get_current_user), session: AsyncSession = Depends(get_db_session)
):
    """Get the current identity and its profile."""
    try:
        profile = await user_service.get_profile(session, user["id"])
        return MeResponse(id=user["id"], email=user["email"], role=user["role"], profile=profile)
    except Exception as e:
        logger.error(f"Error fetching current user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching current user")


@router.put("/api/auth/me", response_model=ProfileResponse)
async def update_me(
    payload: ProfileUpdate,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update the current user's profile names."""
    try:
        profile = await user_service.update_profile(
            session, user["id"], first_name=payload.first_name, last_name=payload.last_name
        )
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating profile: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating profile")
