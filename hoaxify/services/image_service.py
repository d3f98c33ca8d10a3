"""
Profile image storage.

Payloads arrive as base64 text. They are decoded, size-checked on the decoded
bytes, sniffed by magic bytes (JPEG and PNG only) and written under a fresh
random name. Old files are removed only when the caller says so, after the new
reference has been committed.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import secrets
import tempfile
from pathlib import Path
from typing import Optional, Union

from hoaxify.core.errors import PayloadTooLarge, UnsupportedImageType

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 2 * 1024 * 1024
JPEG_MAGIC = b"\xFF\xD8\xFF"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"

_EXTENSIONS = {"jpeg": ".jpg", "png": ".png"}


def sniff_image_kind(data: bytes) -> Optional[str]:
    """Return "jpeg" or "png" from the leading bytes, None for anything else."""
    if data.startswith(JPEG_MAGIC):
        return "jpeg"
    if data.startswith(PNG_MAGIC):
        return "png"
    return None


def _decode_base64(raw: str) -> bytes:
    if not isinstance(raw, str):
        raise UnsupportedImageType()
    text = "".join(raw.split())
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        raise UnsupportedImageType() from None


class ProfileImageManager:
    """Validates, stores and discards files in the profile image folder."""

    def __init__(self, folder: Union[str, Path], max_bytes: int = MAX_IMAGE_BYTES):
        self.folder = Path(folder)
        self.max_bytes = max_bytes
        self.folder.mkdir(parents=True, exist_ok=True)

    def validate(self, raw_base64: str) -> tuple[bytes, str]:
        data = _decode_base64(raw_base64)
        if len(data) > self.max_bytes:
            raise PayloadTooLarge()
        kind = sniff_image_kind(data)
        if kind is None:
            raise UnsupportedImageType()
        return data, kind

    def store(self, data: bytes, kind: str) -> str:
        """Write ``data`` durably under a new random name and return that name."""
        self.folder.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.folder, prefix=".upload-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            while True:
                ref = f"{secrets.token_hex(16)}{_EXTENSIONS[kind]}"
                target = self.folder / ref
                if not target.exists():
                    break
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.info("Stored profile image %s (%d bytes)", ref, len(data))
        return ref

    def process_image(self, raw_base64: str, existing_ref: Optional[str] = None) -> str:
        """
        Validate and store a payload, returning the new reference.

        Single-call form of ``validate`` + ``store`` for callers that have
        nothing else to check. ProfileService runs the two halves itself so an
        image violation is reported together with the field violations.

        ``existing_ref`` is left alone: the caller commits the new reference
        first and only then calls ``discard(existing_ref)``.
        """
        data, kind = self.validate(raw_base64)
        return self.store(data, kind)

    def path_for(self, ref: Optional[str]) -> Optional[Path]:
        """Resolve a stored reference inside the folder; None for anything that escapes it."""
        name = (ref or "").strip()
        if not name or name != os.path.basename(name) or name.startswith("."):
            return None
        return self.folder / name

    def discard(self, ref: Optional[str]) -> None:
        path = self.path_for(ref)
        if path is None:
            return
        try:
            path.unlink()
        except FileNotFoundError:
            return
        logger.info("Discarded profile image %s", ref)
