from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from hoaxify.core.messages import locale_from_header, translate
from hoaxify.routers.deps import read_json, request_credential, service

router = APIRouter(prefix="/api/1.0/users", tags=["users"])


class NewUser(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


def _target_id(raw: str) -> int:
    # Non-numeric ids fall through to the guard and are refused like any other mismatch.
    try:
        return int(raw)
    except (TypeError, ValueError):
        return -1


@router.post("")
def register(body: NewUser, request: Request):
    service(request, "auth_service").register(body.username, body.email, body.password)
    locale = locale_from_header(request.headers.get("accept-language"))
    return {"message": translate("user_create_success", locale)}


@router.put("/{user_id}")
async def update_user(user_id: str, request: Request):
    # The body is checked by the service after authorization, so refusals stay opaque.
    fields = await read_json(request)
    profile_service = service(request, "profile_service")
    return await run_in_threadpool(
        profile_service.update_profile, request_credential(request), _target_id(user_id), fields
    )
