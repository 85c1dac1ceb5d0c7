# backend/app/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from backend.app.api import deps
from backend.app.core.config import Settings
from backend.app.models.user import UserRegistration
from backend.app.schemas.common import success_response
from backend.app.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    TwoFactorProvisioningResponse,
    UserResponse,
)
from backend.app.services.container import Services, get_services

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
        user_in: RegisterRequest,
        services: Services = Depends(get_services),
        settings: Settings = Depends(deps.get_app_settings),
):
    # bcrypt is slow on purpose: keep it off the event loop
    user_id = await run_in_threadpool(services.auth.register, UserRegistration(**user_in.model_dump()))

    provisioning = None
    if user_in.two_factor_enabled and settings.TWO_FACTOR_MODE == "totp":
        # Shown once, at enrollment, so the user can add it to an authenticator app
        result = services.auth.two_factor_provisioning(user_id)
        provisioning = TwoFactorProvisioningResponse.model_validate(result)

    return success_response(RegisterResponse(id=user_id, two_factor_provisioning=provisioning))


@router.post("/login")
async def login(login_in: LoginRequest, services: Services = Depends(get_services)):
    result = await run_in_threadpool(
        services.auth.login,
        login_in.email,
        login_in.master_password,
        login_in.two_factor_code,
    )
    return success_response(
        LoginResponse(token=result.token, user=UserResponse.model_validate(result.user))
    )


@router.post("/logout")
async def logout(
        token: str = Depends(deps.get_bearer_token),
        services: Services = Depends(get_services),
):
    services.auth.logout(token)
    return success_response({"message": "Logged out"})


@router.get("/2fa/provisioning")
async def two_factor_provisioning(
        user_id: str = Depends(deps.get_current_user_id),
        services: Services = Depends(get_services),
):
    result = services.auth.two_factor_provisioning(user_id)
    return success_response(TwoFactorProvisioningResponse.model_validate(result))
