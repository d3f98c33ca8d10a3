"""Ownership and status checks in front of profile mutations."""
from __future__ import annotations

import logging
from typing import Optional

from hoaxify.core.errors import AuthenticationFailure, ForbiddenFailure, InvalidToken
from hoaxify.db.models import User
from hoaxify.repositories.sql_repository import SQLRepository
from hoaxify.services.credential_service import CredentialVerifier
from hoaxify.services.session_service import BasicCredential, BearerCredential, Credential, TokenStore

logger = logging.getLogger(__name__)


class AuthorizationGuard:
    """
    Decides whether a credential may act on a target user.

    Every refusal is the same ForbiddenFailure: callers cannot tell a missing
    token from a bad one, another user's token, an unknown target or an
    inactive account. The reason only goes to the debug log.
    """

    def __init__(
        self,
        token_store: TokenStore,
        repository: Optional[SQLRepository] = None,
        verifier: Optional[CredentialVerifier] = None,
    ):
        self.token_store = token_store
        self.repository = repository or SQLRepository()
        self.verifier = verifier or CredentialVerifier(self.repository)

    def _deny(self, reason: str, target_user_id) -> ForbiddenFailure:
        logger.debug("Update of user %s refused: %s", target_user_id, reason)
        return ForbiddenFailure()

    def _resolve_user(self, credential: Credential, target_user_id) -> User:
        if isinstance(credential, BearerCredential):
            try:
                user_id = self.token_store.resolve(credential.token)
            except InvalidToken:
                raise self._deny("token not resolvable", target_user_id) from None
            user = self.repository.find_by_id(user_id)
            if not user:
                raise self._deny("token owner no longer exists", target_user_id)
            return user
        if isinstance(credential, BasicCredential):
            try:
                return self.verifier.verify(credential.email, credential.password)
            except AuthenticationFailure:
                raise self._deny("basic credentials rejected", target_user_id) from None
        raise self._deny("unsupported credential", target_user_id)

    def authorize(self, credential: Optional[Credential], target_user_id: int) -> User:
        if credential is None:
            raise self._deny("no credential", target_user_id)
        user = self._resolve_user(credential, target_user_id)
        if user.id != target_user_id:
            raise self._deny("credential belongs to another user", target_user_id)
        if user.inactive:
            raise self._deny("account inactive", target_user_id)
        return user
