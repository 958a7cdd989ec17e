"""Key/value snapshot store backed by JSON files on disk."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger


class StoreService:
    """Reads and writes whole JSON documents, one file per key."""

    def load_store(self, path: Path) -> dict[str, Any]:
        """
        Load the JSON document stored at ``path``.

        Args:
            path: Path to the JSON store

        Returns:
            Dictionary payload (empty dict if missing, unreadable or not an object)
        """
        if not path.exists():
            return {}
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON at {path}; ignoring store")
            return {}
        except OSError as exc:
            logger.warning(f"Failed to read {path}: {exc}")
            return {}
        if not isinstance(payload, dict):
            logger.warning(f"Store at {path} does not hold an object; ignoring store")
            return {}
        return payload

    def save_store(self, path: Path, data: dict[str, Any]) -> bool:
        """
        Replace the document at ``path`` with ``data``.

        The payload goes to a uniquely named temp file beside ``path`` and is
        then moved into place, so a failed or concurrent write never leaves a
        partial document behind.

        Returns:
            True if the document was written
        """
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f"{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                json.dump(data, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except OSError as exc:
            logger.warning(f"Failed to write {path}: {exc}")
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False
        return True


_default_store_service: StoreService | None = None


def get_store_service() -> StoreService:
    """Return a shared StoreService instance."""
    global _default_store_service
    if _default_store_service is None:
        _default_store_service = StoreService()
    return _default_store_service


def reset_store_service() -> None:
    global _default_store_service
    _default_store_service = None
