"""Credential verification (e-mail + password)."""
from __future__ import annotations

import logging
from typing import Optional

from hoaxify.core.errors import AuthenticationFailure
from hoaxify.core.security import burn_password_check, hash_password, needs_rehash, verify_password
from hoaxify.db.models import User
from hoaxify.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)


class CredentialVerifier:
    """
    Checks an e-mail/password pair against stored users.

    Unknown e-mail and wrong password raise the same AuthenticationFailure.
    Inactive users are returned like any other: rejecting them is up to the
    caller (login or the authorization guard).
    """

    def __init__(self, repository: Optional[SQLRepository] = None):
        self.repository = repository or SQLRepository()

    def verify(self, email: str, password: str) -> User:
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthenticationFailure()
        raw_email = email.strip()
        if not raw_email or not password:
            raise AuthenticationFailure()
        user = self.repository.find_by_email(raw_email)
        if not user:
            burn_password_check(password)
            logger.debug("Credential check failed")
            raise AuthenticationFailure()
        if not verify_password(password, user.password_hash):
            logger.debug("Credential check failed")
            raise AuthenticationFailure()
        if needs_rehash(user.password_hash):
            new_hash = hash_password(password)
            self.repository.update_password(user.id, new_hash)
            user.password_hash = new_hash
        return user
