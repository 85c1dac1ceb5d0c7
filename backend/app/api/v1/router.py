# backend/app/api/v1/router.py
from fastapi import APIRouter

from backend.app.api.v1.endpoints import auth, passwords, recovery

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(recovery.router, prefix="/recovery", tags=["recovery"])
api_router.include_router(passwords.router, prefix="/passwords", tags=["passwords"])
