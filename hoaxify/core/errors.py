"""
Failure kinds raised by the services.

Each failure carries a message key (resolved to text by core.messages) and the
HTTP status the API layer answers with. None of them is fatal to the process.
"""

from __future__ import annotations

from typing import Dict, Optional


class ProfileError(Exception):
    """Base class for every expected, client-visible failure."""

    status_code = 500
    default_key = "internal_error"

    def __init__(self, message_key: Optional[str] = None):
        self.message_key = message_key or self.default_key
        super().__init__(self.message_key)


class AuthenticationFailure(ProfileError):
    """Bad or missing login credentials. Unknown e-mail and wrong password look the same."""

    status_code = 401
    default_key = "authentication_failure"


class ForbiddenFailure(ProfileError):
    """Caller may not act on the target user, for whatever reason."""

    status_code = 403
    default_key = "unauthorized_user_update"


class ValidationFailure(ProfileError):
    """One or more field violations, accumulated rather than fail-fast."""

    status_code = 400
    default_key = "validation_failure"

    def __init__(self, violations: Optional[Dict[str, str]] = None, message_key: Optional[str] = None):
        super().__init__(message_key)
        self.violations: Dict[str, str] = dict(violations or {})


class _ImageFailure(ValidationFailure):
    field = "image"

    def __init__(self):
        super().__init__({self.field: self.default_key})


class PayloadTooLarge(_ImageFailure):
    default_key = "profile_image_size"


class UnsupportedImageType(_ImageFailure):
    default_key = "unsupported_image_file"


class InvalidToken(Exception):
    """Raised by token stores when a token is not live. Never surfaced to clients."""
