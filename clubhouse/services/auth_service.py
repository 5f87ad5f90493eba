"""
Authentication service: password hashing, access tokens and email helpers.
"""

import os
import re
from datetime import timedelta
from typing import Optional, Dict, Any

import bcrypt
from jose import jwt, JWTError

from clubhouse.utils.datetime_utils import utcnow

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-this-secret-in-env")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str) -> str:
    """
    Hash a plaintext password using bcrypt with a fresh salt.

    Args:
        password: Plaintext password

    Returns:
        bcrypt hash as a string
    """
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a plaintext password against a bcrypt hash.

    Returns False instead of raising for malformed hashes.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to embed (e.g. {"user_id": 1, "email": "a@b.com"})
        expires_delta: Optional lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT string
    """
    to_encode = dict(data)
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": int(expire.timestamp()), "type": "access"})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Returns:
        Token payload, or None if the token is invalid or expired
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    return payload


def validate_email(email: str) -> bool:
    """Check that an email address looks deliverable."""
    if not email:
        return False
    return bool(_EMAIL_RE.match(email.strip()))


def normalize_email(email: str) -> str:
    """
    Normalize an email address (trimmed, lowercase).

    Raises:
        ValueError: If the email is empty or malformed
    """
    if not email or not email.strip():
        raise ValueError("Email is required")
    normalized = email.strip().lower()
    if not validate_email(normalized):
        raise ValueError(f"Invalid email address: {email}")
    return normalized
