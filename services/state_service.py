from __future__ import annotations

from pathlib import Path

from loguru import logger

from services.store_service import StoreService, get_store_service
from utils import constants
from utils.errors import SnapshotFormatError
from utils.readings import AppData
from utils.snapshot import snapshot_from_dict, snapshot_to_dict


class StateService:
    """Loads and persists the whole application snapshot."""

    def __init__(
        self,
        snapshot_path: Path | None = None,
        store_service: StoreService | None = None,
    ) -> None:
        self.snapshot_path = snapshot_path or constants.SNAPSHOT_FILE
        self.store = store_service or get_store_service()

    def load(self) -> AppData:
        """
        Load the persisted snapshot.

        A missing or malformed snapshot is not fatal: the application starts
        from an empty library (no cards, no groups) and the problem is logged.
        """
        payload = self.store.load_store(self.snapshot_path)
        if not payload:
            return AppData()
        try:
            data = snapshot_from_dict(payload)
        except SnapshotFormatError as exc:
            logger.warning(f"Discarding unreadable snapshot at {self.snapshot_path}: {exc}")
            return AppData()
        logger.info(
            f"Loaded {len(data.cards)} cards and {len(data.groups)} groups from {self.snapshot_path}"
        )
        return data

    def save(self, data: AppData) -> bool:
        saved = self.store.save_store(self.snapshot_path, snapshot_to_dict(data))
        if saved:
            logger.debug(f"Snapshot written to {self.snapshot_path}")
        return saved


__all__ = ["StateService"]
