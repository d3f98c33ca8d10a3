"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from hoaxify.core.errors import ForbiddenFailure, ValidationFailure
from hoaxify.core.security import hash_password
from hoaxify.db.models import User
from hoaxify.repositories.sql_repository import SQLRepository
from hoaxify.services.credential_service import CredentialVerifier
from hoaxify.services.profile_service import validate_username
from hoaxify.services.session_service import BearerCredential, Credential, TokenStore

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_MIN = 6


@dataclass
class LoginSuccess:
    id: int
    username: str
    token: str
    image: Optional[str]


@dataclass
class AuthService:
    """Handles registration, login and logout flows."""

    token_store: TokenStore
    repository: Optional[SQLRepository] = None
    verifier: Optional[CredentialVerifier] = None

    def __post_init__(self):
        self.repository = self.repository or SQLRepository()
        self.verifier = self.verifier or CredentialVerifier(self.repository)

    # -------------------------------------- registration --------------------------------------
    def _password_violation(self, password) -> Optional[str]:
        if not isinstance(password, str) or not password:
            return "password_null"
        if len(password) < PASSWORD_MIN:
            return "password_size"
        if not (re.search(r"[a-z]", password) and re.search(r"[A-Z]", password) and re.search(r"\d", password)):
            return "password_pattern"
        return None

    def register(self, username: str, email: str, password: str) -> User:
        violations = {}
        username_key = validate_username(username, self.repository)
        if username_key:
            violations["username"] = username_key
        raw_email = (email or "").strip() if isinstance(email, str) else ""
        if not raw_email:
            violations["email"] = "email_null"
        elif not EMAIL_RE.match(raw_email):
            violations["email"] = "email_invalid"
        elif self.repository.find_by_email(raw_email):
            violations["email"] = "email_inuse"
        password_key = self._password_violation(password)
        if password_key:
            violations["password"] = password_key
        if violations:
            raise ValidationFailure(violations)
        user = self.repository.create_user(username, raw_email, hash_password(password))
        logger.info("Registered user %s", user.id)
        return user

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> LoginSuccess:
        user = self.verifier.verify(email, password)
        if user.inactive:
            logger.info("Login refused for inactive user %s", user.id)
            raise ForbiddenFailure("inactive_authentication_failure")
        token = self.token_store.issue(user.id)
        logger.info("User %s logged in", user.id)
        return LoginSuccess(id=user.id, username=user.username, token=token, image=user.image)

    def logout(self, credential: Optional[Credential]) -> None:
        if isinstance(credential, BearerCredential):
            self.token_store.revoke(credential.token)
