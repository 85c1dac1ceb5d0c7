# backend/app/api/v1/endpoints/passwords.py
from fastapi import APIRouter, Depends, status

from backend.app.api import deps
from backend.app.models.credential import CredentialInput, CredentialUpdate
from backend.app.schemas.common import success_response
from backend.app.schemas.credential import (
    PasswordCreate,
    PasswordCreated,
    PasswordDetailResponse,
    PasswordSummaryResponse,
    PasswordUpdate,
)
from backend.app.services.container import Services, get_services

router = APIRouter()


# 1. LIST (secrets never included)
@router.get("")
async def list_passwords(
        user_id: str = Depends(deps.get_current_user_id),
        services: Services = Depends(get_services),
):
    items = services.passwords.list(user_id)
    return success_response([PasswordSummaryResponse.model_validate(item) for item in items])


# 2. CREATE
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_password(
        item_in: PasswordCreate,
        user_id: str = Depends(deps.get_current_user_id),
        services: Services = Depends(get_services),
):
    credential_id = services.passwords.create(user_id, CredentialInput(**item_in.model_dump()))
    return success_response(PasswordCreated(id=credential_id))


# 3. READ ONE (decrypted)
@router.get("/{password_id}")
async def get_password(
        password_id: str,
        user_id: str = Depends(deps.get_current_user_id),
        services: Services = Depends(get_services),
):
    detail = services.passwords.get(password_id, user_id)
    return success_response(
        PasswordDetailResponse(
            id=detail.id,
            title=detail.title,
            username=detail.username,
            url=detail.url,
            category=detail.category,
            notes=detail.notes,
            date_created=detail.date_created,
            date_modified=detail.date_modified,
            expiration_date=detail.expiration_date,
            is_favorite=detail.is_favorite,
            password=detail.decrypted_password,
        )
    )


# 4. PARTIAL UPDATE
@router.put("/{password_id}")
async def update_password(
        password_id: str,
        item_in: PasswordUpdate,
        user_id: str = Depends(deps.get_current_user_id),
        services: Services = Depends(get_services),
):
    # Only the fields the client actually sent
    changes = CredentialUpdate(**item_in.model_dump(exclude_unset=True))
    services.passwords.update(password_id, user_id, changes)
    return success_response({"success": True})


# 5. DELETE
@router.delete("/{password_id}")
async def delete_password(
        password_id: str,
        user_id: str = Depends(deps.get_current_user_id),
        services: Services = Depends(get_services),
):
    services.passwords.delete(password_id, user_id)
    return success_response({"success": True})
