# backend/app/api/v1/endpoints/recovery.py
"""
API endpoints for password recovery.

Endpoints:
- POST /recovery/request            - Start recovery (always the same answer)
- GET  /recovery/{token}/question   - Security question for a pending token
- POST /recovery/verify             - Answer the question and set a new password
- POST /recovery/{token}/cancel     - Abandon a pending request

Security:
- /request never reveals whether the e-mail exists and never returns the token
- All terminal token states answer with the same invalidOrExpiredToken code
- In production the token would be e-mailed to the account owner. No mail
  sender is wired in yet, so the token is neither returned nor logged
"""
from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from backend.app.schemas.common import success_response
from backend.app.schemas.recovery import (
    RecoveryRequestBody,
    RecoveryRequestResponse,
    RecoveryVerifyRequest,
    RecoveryVerifyResponse,
    SecurityQuestionResponse,
)
from backend.app.services.container import Services, get_services

router = APIRouter()


@router.post("/request")
async def request_recovery(
        body: RecoveryRequestBody,
        request: Request,
        services: Services = Depends(get_services),
):
    ip_address = request.client.host if request.client else "unknown"
    services.recovery.request_recovery(body.email, ip_address)

    # Identical answer whether or not the e-mail exists
    return success_response(RecoveryRequestResponse())


@router.get("/{token}/question")
async def get_security_question(token: str, services: Services = Depends(get_services)):
    question = services.recovery.get_security_question(token)
    return success_response(SecurityQuestionResponse(security_question=question))


@router.post("/verify")
async def verify_recovery(body: RecoveryVerifyRequest, services: Services = Depends(get_services)):
    await run_in_threadpool(
        services.recovery.verify_recovery,
        body.token,
        body.security_answer,
        body.new_master_password,
        body.confirm_new_master_password,
    )
    return success_response(RecoveryVerifyResponse())


@router.post("/{token}/cancel")
async def cancel_recovery(token: str, services: Services = Depends(get_services)):
    services.recovery.cancel_recovery(token)
    return success_response({"message": "Recovery request cancelled"})
