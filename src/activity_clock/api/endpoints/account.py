"""Login endpoint."""

from fastapi import APIRouter, Depends, HTTPException, status  # type: ignore[import-untyped]

from activity_clock.api.auth import create_token_for_user
from activity_clock.api.dependencies import get_accounts, get_config
from activity_clock.api.models import LoginRequest, LoginResponse, UserResponse
from activity_clock.core.accounts import AccountManager
from activity_clock.core.config import ConfigManager

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    request: LoginRequest,
    accounts: AccountManager = Depends(get_accounts),
    config: ConfigManager = Depends(get_config),
) -> LoginResponse:
    """Log in, registering the name on first use.

    Example:
        >>> POST /api/auth/login
        {"name": "asha", "password": "secret"}
        {"success": true, "user": {"id": "uuid", "name": "asha"}, "accessToken": "...", ...}
    """
    try:
        user = accounts.login(request.name, request.password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    token = create_token_for_user(config, user.id)
    return LoginResponse(
        user=UserResponse(id=user.id, name=user.name),
        access_token=token["access_token"],
        token_type=token["token_type"],
        expires_in=token["expires_in"],
    )
