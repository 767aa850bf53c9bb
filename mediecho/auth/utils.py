"""
Authentication utilities for token-based auth.

Access tokens are itsdangerous timed signatures carried as a bearer token or in
the ``token`` cookie. Refresh tokens are signed with a separate secret.
"""

from datetime import datetime
from typing import Optional

from fastapi import Request, Depends, HTTPException
from itsdangerous import URLSafeTimedSerializer, BadData
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from mediecho.config import Settings, get_settings
from mediecho.database import get_db, DATABASE_URL
from mediecho.models import User

if DATABASE_URL.startswith("sqlite"):
    # pbkdf2_sha256 is widely available and avoids compiled bcrypt issues in dev
    pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
else:
    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt has a 72-byte limit on passwords
BCRYPT_MAX_BYTES = 72

TOKEN_COOKIE = "token"
ACCESS_SALT = "mediecho-access"
REFRESH_SALT = "mediecho-refresh"


def _safe_password(password: str) -> bytes:
    """
    Encode password and truncate to bcrypt's 72-byte limit if needed.
    """
    password_bytes = password.encode("utf-8")
    return password_bytes[:BCRYPT_MAX_BYTES]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return pwd_context.verify(_safe_password(plain_password), hashed_password)
    except (ValueError, TypeError):
        # Malformed hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storing."""
    return pwd_context.hash(_safe_password(password))


def _access_serializer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.secret_key, salt=ACCESS_SALT)


def _refresh_serializer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.refresh_token_secret, salt=REFRESH_SALT)


def create_access_token(user_id: int, settings: Settings) -> str:
    """Create a short-lived access token for a user."""
    return _access_serializer(settings).dumps(
        {"user_id": user_id, "created": datetime.utcnow().isoformat()}
    )


def create_refresh_token(user_id: int, settings: Settings) -> str:
    """Create a long-lived refresh token for a user."""
    return _refresh_serializer(settings).dumps(
        {"user_id": user_id, "created": datetime.utcnow().isoformat()}
    )


def decode_access_token(token: str, settings: Settings) -> Optional[int]:
    """Return the user id of a valid, unexpired access token, else None."""
    try:
        data = _access_serializer(settings).loads(
            token, max_age=settings.access_token_expire_minutes * 60
        )
    except BadData:
        return None
    return data.get("user_id") if isinstance(data, dict) else None


def decode_refresh_token(token: str, settings: Settings) -> Optional[int]:
    """Return the user id of a valid, unexpired refresh token, else None."""
    try:
        data = _refresh_serializer(settings).loads(
            token, max_age=settings.refresh_token_expire_days * 24 * 60 * 60
        )
    except BadData:
        return None
    return data.get("user_id") if isinstance(data, dict) else None


def get_request_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, falling back to the cookie."""
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(TOKEN_COOKIE) or None


def get_current_user_optional(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Optional[User]:
    """
    Get the current user from the request token.
    Returns None if not authenticated.
    """
    token = get_request_token(request)
    if not token:
        return None

    user_id = decode_access_token(token, settings)
    if not user_id:
        return None

    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """
    Get the current user.
    Raises HTTPException if not authenticated.
    """
    if not user:
        raise HTTPException(
            status_code=401,
            detail="Not authorized to access this route",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Authenticate a user by email and password.
    Returns the user if authentication succeeds, None otherwise.
    """
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


def set_token_cookie(response, token: str, settings: Settings):
    """Set the access token cookie on response."""
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=token,
        httponly=True,
        max_age=settings.access_token_expire_minutes * 60,
        samesite="lax",
        secure=settings.is_production,
    )
    return response
