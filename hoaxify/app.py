"""
FastAPI application factory.

Run with ``uvicorn --factory hoaxify.app:create_app``.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from hoaxify.core.config import Settings, get_settings
from hoaxify.core.errors import ProfileError, ValidationFailure
from hoaxify.core.log import configure_logging
from hoaxify.core.messages import locale_from_header, translate
from hoaxify.db.session import create_all
from hoaxify.repositories.sql_repository import SQLRepository
from hoaxify.routers import auth as auth_router
from hoaxify.routers import users as users_router
from hoaxify.services.auth_service import AuthService
from hoaxify.services.authorization_service import AuthorizationGuard
from hoaxify.services.credential_service import CredentialVerifier
from hoaxify.services.image_service import ProfileImageManager
from hoaxify.services.profile_service import ProfileService
from hoaxify.services.session_service import build_token_store

logger = logging.getLogger(__name__)

ONE_YEAR_SECONDS = 365 * 24 * 60 * 60


class CachedStaticFiles(StaticFiles):
    """Stored images never change under the same name, so they can be cached for a year."""

    def file_response(self, *args, **kwargs):
        resp = super().file_response(*args, **kwargs)
        resp.headers["Cache-Control"] = f"public, max-age={ONE_YEAR_SECONDS}"
        return resp


def _error_body(request: Request, message_key: str, violations: Optional[dict] = None) -> dict:
    locale = locale_from_header(request.headers.get("accept-language"))
    body = {
        "path": request.url.path,
        "timestamp": int(time.time() * 1000),
        "message": translate(message_key, locale),
    }
    if violations:
        body["validationErrors"] = {field: translate(key, locale) for field, key in violations.items()}
    return body


async def _profile_error_handler(request: Request, exc: ProfileError):
    violations = exc.violations if isinstance(exc, ValidationFailure) else None
    key = "validation_failure" if violations else exc.message_key
    return JSONResponse(_error_body(request, key, violations), status_code=exc.status_code)


async def _request_validation_handler(request: Request, exc: RequestValidationError):
    violations = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        violations[".".join(loc) or "body"] = error.get("msg", "invalid")
    return JSONResponse(_error_body(request, "validation_failure", violations), status_code=400)


async def _unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(_error_body(request, "internal_error"), status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    create_all()

    app = FastAPI(title="Hoaxify API")

    repository = SQLRepository()
    token_store = build_token_store(settings)
    verifier = CredentialVerifier(repository)
    guard = AuthorizationGuard(token_store, repository, verifier)
    images = ProfileImageManager(settings.profile_folder)

    app.state.settings = settings
    app.state.token_store = token_store
    app.state.images = images
    app.state.auth_service = AuthService(token_store, repository, verifier)
    app.state.profile_service = ProfileService(guard, images, repository)

    app.add_exception_handler(ProfileError, _profile_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.mount("/images", CachedStaticFiles(directory=str(images.folder)), name="images")

    logger.info("Hoaxify API ready (env=%s, token store=%s)", settings.app_env, settings.token_store)
    return app
