# backend/app/api/deps.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.app.core.config import Settings, get_settings
from backend.app.core.errors import AuthenticationFailed, ErrorCode
from backend.app.services.container import Services, get_services

# auto_error=False: a missing header must produce our own
# authenticationRequired envelope, not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


async def get_bearer_token(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationFailed(ErrorCode.AUTHENTICATION_REQUIRED)
    return credentials.credentials


async def get_current_user_id(
        token: str = Depends(get_bearer_token),
        services: Services = Depends(get_services),
) -> str:
    """
    Session gate for every authenticated route.

    Raises invalidSession / sessionExpired (mapped to 401) before any store
    is touched.
    """
    return services.auth.validate_session(token)
