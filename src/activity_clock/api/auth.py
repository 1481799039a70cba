"""Authentication for the API.

Login resolves a name and password to a user and issues a JWT whose subject
is the user id. Tracking endpoints resolve the acting user from that token,
or from an explicit ``userId`` when authentication is disabled.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, HTTPException, status  # type: ignore[import-untyped]
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer  # type: ignore[import-untyped]
from jose import JWTError, jwt  # type: ignore[import-untyped]

from activity_clock.api.dependencies import get_config
from activity_clock.core.config import ConfigManager

ALGORITHM = "HS256"

# Security scheme for dependency injection; missing headers are handled below
security = HTTPBearer(auto_error=False)


def create_access_token(
    data: dict[str, Any], secret_key: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token
        secret_key: Secret key for encoding
        expires_delta: Optional expiration time delta (default 10 days)

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=10))
    to_encode.update({"exp": expire, "iat": now})

    encoded_jwt: str = jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)
    return encoded_jwt


def get_token_expiry_seconds(config: ConfigManager) -> int:
    """Get token expiry time in seconds from config."""
    hours: int = config.get("api.authentication.token_expiry_hours", 240)
    return hours * 3600


def create_token_for_user(config: ConfigManager, user_id: str) -> dict[str, Any]:
    """Create a complete token response.

    Args:
        config: Configuration manager
        user_id: User identifier for the token subject

    Returns:
        Dictionary with access_token, token_type, and expires_in
    """
    secret_key = config.ensure_api_secret_key()
    expires_in = get_token_expiry_seconds(config)

    access_token = create_access_token(
        data={"sub": user_id}, secret_key=secret_key, expires_delta=timedelta(seconds=expires_in)
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": expires_in,
    }


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    config: ConfigManager = Depends(get_config),
) -> dict[str, Any]:
    """Verify the bearer token on a request.

    Returns:
        Decoded token payload, or an empty payload when authentication is disabled

    Raises:
        HTTPException: If the token is missing, invalid or expired
    """
    if not config.get("api.authentication.enabled", True):
        return {}

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    secret_key = config.get("api.authentication.secret_key")
    if not secret_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API secret key not configured",
        )

    try:
        payload: dict[str, Any] = jwt.decode(
            credentials.credentials, secret_key, algorithms=[ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def resolve_user_id(payload: dict[str, Any], requested: Optional[str]) -> str:
    """Decide which user a tracking request acts for.

    Args:
        payload: Verified token payload (empty when authentication is disabled)
        requested: ``userId`` supplied by the client, if any

    Returns:
        User id to act for

    Raises:
        HTTPException: 403 if ``requested`` differs from the token subject,
            400 if no user can be determined
    """
    subject = payload.get("sub")
    if subject:
        if requested and requested != subject:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="userId does not match the authenticated user",
            )
        return str(subject)

    if not requested:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="userId is required",
        )
    return requested
