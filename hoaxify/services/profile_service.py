"""
Profile update use case.

Authorize, validate every field, store the new image, commit the user row and
only then discard the image file it replaced.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Dict, Mapping, Optional

from hoaxify.core.errors import ForbiddenFailure, ValidationFailure
from hoaxify.db.models import User
from hoaxify.repositories.sql_repository import SQLRepository
from hoaxify.services.authorization_service import AuthorizationGuard
from hoaxify.services.image_service import ProfileImageManager
from hoaxify.services.session_service import Credential

logger = logging.getLogger(__name__)

USERNAME_MIN = 4
USERNAME_MAX = 32

_MISSING = object()


def user_view(user: User) -> Dict[str, Any]:
    """Public projection returned after an update: nothing but these four fields."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "image": user.image,
    }


def validate_username(value: Any, repository: SQLRepository, *, current_user_id: Optional[int] = None) -> Optional[str]:
    """Return the violation key for ``value`` or None when it is acceptable."""
    if value is None:
        return "username_null"
    if not isinstance(value, str) or not (USERNAME_MIN <= len(value) <= USERNAME_MAX):
        return "username_size"
    owner = repository.find_by_username(value)
    if owner and owner.id != current_user_id:
        return "username_inuse"
    return None


class _UserLocks:
    """One lock per user id, so commit-then-discard runs serially per profile."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = defaultdict(threading.Lock)

    def for_user(self, user_id: int) -> threading.Lock:
        with self._guard:
            return self._locks[user_id]


class ProfileService:
    def __init__(
        self,
        guard: AuthorizationGuard,
        images: ProfileImageManager,
        repository: Optional[SQLRepository] = None,
    ):
        self.guard = guard
        self.images = images
        self.repository = repository or guard.repository
        self._locks = _UserLocks()

    def _collect_field_violations(self, user: User, fields: Mapping[str, Any]) -> Dict[str, str]:
        violations: Dict[str, str] = {}
        if "username" in fields:
            key = validate_username(fields["username"], self.repository, current_user_id=user.id)
            if key:
                violations["username"] = key
        email = fields.get("email", _MISSING)
        if email is not _MISSING and email != user.email:
            violations["email"] = "email_immutable"
        return violations

    def update_profile(self, credential: Optional[Credential], target_user_id: int, fields: Mapping[str, Any]) -> Dict[str, Any]:
        user = self.guard.authorize(credential, target_user_id)
        if fields is None:
            fields = {}
        if not isinstance(fields, Mapping):
            raise ValidationFailure({"body": "invalid_body"})

        violations = self._collect_field_violations(user, fields)
        payload = fields.get("image")
        decoded = None
        if payload:
            try:
                decoded = self.images.validate(payload)
            except ValidationFailure as exc:
                violations.update(exc.violations)
        if violations:
            logger.info("Update of user %s rejected: %s", user.id, sorted(violations))
            raise ValidationFailure(violations)

        new_ref = self.images.store(*decoded) if decoded else None
        with self._locks.for_user(user.id):
            try:
                current = self.repository.find_by_id(user.id)
                if current is None:
                    raise ForbiddenFailure()
                replaced_ref = current.image
                if "username" in fields:
                    current.username = fields["username"]
                if new_ref:
                    current.image = new_ref
                saved = self.repository.save(current)
            except BaseException:
                if new_ref:
                    self.images.discard(new_ref)
                raise
            if new_ref and replaced_ref and replaced_ref != new_ref:
                self.images.discard(replaced_ref)

        logger.info("Updated profile of user %s", saved.id)
        return user_view(saved)
