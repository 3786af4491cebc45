"""Identifier and secret generation."""

import re
import secrets
import uuid

REPORT_PREFIX = "vsr_"
IMAGE_PREFIX = "img_"
TOKEN_PREFIX = "tok_"

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,8}$")


def generate_id(prefix: str) -> str:
    """Generate a prefixed unique ID such as ``vsr_a1b2c3d4e5f6a7b8``."""
    return f"{prefix}{uuid.uuid4().hex[:16]}"


def generate_image_key(filename: str | None) -> str:
    """Generate an image storage key, keeping a safe file extension if present."""
    key = generate_id(IMAGE_PREFIX)
    if filename and "." in filename:
        extension = "." + filename.rsplit(".", 1)[1].lower()
        if _EXTENSION_RE.match(extension):
            key += extension
    return key


def generate_token() -> str:
    """Generate a raw organization member token (only its hash is stored)."""
    return f"vt_{secrets.token_urlsafe(32)}"
