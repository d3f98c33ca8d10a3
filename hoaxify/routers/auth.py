from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool

from hoaxify.routers.deps import read_json, request_credential, service

router = APIRouter(prefix="/api/1.0", tags=["auth"])


@router.post("/auth")
async def login(request: Request):
    # Missing, malformed or mistyped credentials all end as the same 401 from the service.
    body = await read_json(request)
    if not isinstance(body, dict):
        body = {}
    auth_service = service(request, "auth_service")
    result = await run_in_threadpool(auth_service.login, body.get("email"), body.get("password"))
    return {"id": result.id, "username": result.username, "token": result.token, "image": result.image}


@router.post("/logout")
def logout(request: Request):
    service(request, "auth_service").logout(request_credential(request))
    return {}
