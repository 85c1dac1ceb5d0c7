# backend/app/schemas/common.py
"""
Response envelope and shared schema config.

Every response body has the same shape:
    {"success": true,  "data": ..., "timestamp": "..."}
    {"success": false, "error": {"code": ..., "message": ...}, "timestamp": "..."}

JSON field names are camelCase on the wire; Python code uses snake_case.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_response(data: Any = None) -> dict:
    return {
        "success": True,
        "data": jsonable_encoder(data, by_alias=True),
        "timestamp": _timestamp(),
    }


def error_response(code: str, message: Optional[str] = None) -> dict:
    return {
        "success": False,
        "error": {"code": code, "message": message or code},
        "timestamp": _timestamp(),
    }
