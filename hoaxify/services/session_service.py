"""Session helpers (issue tokens, validation, Authorization header parsing)."""
from __future__ import annotations

import base64
import binascii
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from hoaxify.core.config import Settings
from hoaxify.core.errors import InvalidToken
from hoaxify.db.models import Token
from hoaxify.db.session import get_session

logger = logging.getLogger(__name__)

_TOKEN_BYTES = 32
_MAX_ISSUE_ATTEMPTS = 5


def _new_token() -> str:
    return secrets.token_urlsafe(_TOKEN_BYTES)


class TokenStore:
    """Maps opaque tokens to user ids. A token is live until revoked; there is no expiry."""

    def issue(self, user_id: int) -> str:
        raise NotImplementedError

    def resolve(self, token: str) -> int:
        raise NotImplementedError

    def revoke(self, token: str) -> None:
        raise NotImplementedError

    def revoke_all(self, user_id: int) -> None:
        raise NotImplementedError


class InMemoryTokenStore(TokenStore):
    """Lock-guarded dict, owned by whoever builds it (one per app or per test)."""

    def __init__(self) -> None:
        self._tokens: Dict[str, int] = {}
        self._lock = threading.Lock()

    def issue(self, user_id: int) -> str:
        with self._lock:
            token = _new_token()
            while token in self._tokens:
                token = _new_token()
            self._tokens[token] = user_id
        logger.info("Issued session token for user %s", user_id)
        return token

    def resolve(self, token: str) -> int:
        if not token:
            raise InvalidToken()
        with self._lock:
            user_id = self._tokens.get(token)
        if user_id is None:
            raise InvalidToken()
        return user_id

    def revoke(self, token: str) -> None:
        if not token:
            return
        with self._lock:
            user_id = self._tokens.pop(token, None)
        if user_id is not None:
            logger.info("Revoked session token for user %s", user_id)

    def revoke_all(self, user_id: int) -> None:
        with self._lock:
            stale = [token for token, owner in self._tokens.items() if owner == user_id]
            for token in stale:
                del self._tokens[token]

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


class SQLTokenStore(TokenStore):
    """Tokens persisted in the ``tokens`` table; the primary key keeps them unique."""

    def issue(self, user_id: int) -> str:
        for _ in range(_MAX_ISSUE_ATTEMPTS):
            token = _new_token()
            with get_session() as session:
                session.add(Token(token=token, user_id=user_id, created_at=datetime.now(timezone.utc)))
                try:
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    continue
            logger.info("Issued session token for user %s", user_id)
            return token
        raise RuntimeError("Could not allocate a unique session token.")

    def resolve(self, token: str) -> int:
        if not token:
            raise InvalidToken()
        with get_session() as session:
            entity = session.get(Token, token)
            if not entity:
                raise InvalidToken()
            return entity.user_id

    def revoke(self, token: str) -> None:
        if not token:
            return
        with get_session() as session:
            result = session.execute(delete(Token).where(Token.token == token))
            session.commit()
        if result.rowcount:
            logger.info("Revoked session token")

    def revoke_all(self, user_id: int) -> None:
        with get_session() as session:
            session.execute(delete(Token).where(Token.user_id == user_id))
            session.commit()


def build_token_store(settings: Settings) -> TokenStore:
    if settings.token_store == "memory":
        return InMemoryTokenStore()
    return SQLTokenStore()


# -------------------------- Authorization header --------------------------
@dataclass(frozen=True)
class BearerCredential:
    token: str


@dataclass(frozen=True)
class BasicCredential:
    email: str
    password: str


Credential = Union[BearerCredential, BasicCredential]


def parse_authorization(header: Optional[str]) -> Optional[Credential]:
    """Read ``Bearer <token>`` or ``Basic <base64(email:password)>``; anything else is no credential."""
    value = (header or "").strip()
    if not value or " " not in value:
        return None
    scheme, _, payload = value.partition(" ")
    scheme = scheme.lower()
    payload = payload.strip()
    if not payload:
        return None
    if scheme == "bearer":
        return BearerCredential(token=payload)
    if scheme == "basic":
        try:
            decoded = base64.b64decode(payload, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None
        email, sep, password = decoded.partition(":")
        if not sep:
            return None
        return BasicCredential(email=email, password=password)
    return None
