"""Small request helpers shared by the routers."""
from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import Request

from hoaxify.services.session_service import Credential, parse_authorization

# Stands in for a body that is not JSON; services reject it like any other non-object body.
MALFORMED_BODY = object()


def service(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if svc is None:
        raise RuntimeError(f"Service {name!r} is not configured")
    return svc


def request_credential(request: Request) -> Optional[Credential]:
    return parse_authorization(request.headers.get("authorization"))


async def read_json(request: Request) -> Any:
    """Parse the body without schema checks: None when empty, MALFORMED_BODY when not JSON."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, ValueError):
        return MALFORMED_BODY
