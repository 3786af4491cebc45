"""Local filesystem blob storage for report images."""

import logging
import re
from pathlib import Path

from visor.errors.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def _clean_segment(value: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", value.strip()).lstrip(".")
    return cleaned or "object"


class LocalImageStorage:
    """Stores image bytes under ``<root>/<organization>/<key>``."""

    def __init__(self, root: str | Path):
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, organization: str, key: str) -> Path:
        return self._root / _clean_segment(organization) / _clean_segment(key)

    def put(self, organization: str, key: str, data: bytes) -> Path:
        path = self._path(organization, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def get(self, organization: str, key: str) -> bytes:
        path = self._path(organization, key)
        if not path.is_file():
            raise NotFoundError("Image", key)
        return path.read_bytes()

    def delete(self, organization: str, key: str) -> bool:
        path = self._path(organization, key)
        if not path.is_file():
            logger.warning("Image blob already missing: %s", path)
            return False
        path.unlink()
        return True
