"""Snapshot persistence using a JSON file with atomic writes."""

import json
from datetime import UTC, date, datetime
from pathlib import Path
from threading import RLock
from typing import Any

from pydantic import ValidationError

from devquest.core.config import get_settings
from devquest.core.logging import get_logger
from devquest.shared.exceptions import SnapshotStoreError
from devquest.stats.models import StatsSnapshot

logger = get_logger(__name__)


class SnapshotStore:
    """Thread-safe day-keyed snapshot persistence using a JSON file.

    Layout: ``{"snapshots": {user_id: {"YYYY-MM-DD": {...}}}}``.
    """

    def __init__(self, file_path: str | Path | None = None) -> None:
        """Initialize SnapshotStore with file path.

        Args:
            file_path: Path to JSON snapshot file (defaults to settings)
        """
        if file_path is None:
            file_path = get_settings().snapshot_file_path
        self.file_path = Path(file_path)
        # Reentrant so save_snapshot can hold it across read and write
        self.lock = RLock()
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Create snapshot file with empty dict if it doesn't exist."""
        if not self.file_path.exists():
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self.file_path.write_text("{}")
            logger.info("snapshot.file.created", path=str(self.file_path))

    def _read_state(self) -> dict[str, Any]:
        """Read all snapshots from the JSON file.

        Returns:
            State dictionary, or empty dict if file is corrupted
        """
        with self.lock:
            try:
                content = self.file_path.read_text()
                result: dict[str, Any] = json.loads(content)
                return result
            except json.JSONDecodeError as e:
                logger.warning(
                    "snapshot.file.corrupted",
                    path=str(self.file_path),
                    error=str(e),
                )
                return {}
            except OSError as e:
                logger.error(
                    "snapshot.file.read_failed",
                    path=str(self.file_path),
                    error=str(e),
                    exc_info=True,
                )
                raise SnapshotStoreError(f"Failed to read snapshot file: {e}") from e

    def _write_state(self, state: dict[str, Any]) -> None:
        """Write all snapshots to the JSON file atomically (temp file + rename)."""
        with self.lock:
            try:
                temp_path = self.file_path.with_suffix(".tmp")
                temp_path.write_text(json.dumps(state, indent=2))
                temp_path.replace(self.file_path)
            except OSError as e:
                logger.error(
                    "snapshot.file.write_failed",
                    path=str(self.file_path),
                    error=str(e),
                    exc_info=True,
                )
                raise SnapshotStoreError(f"Failed to write snapshot file: {e}") from e

    def _user_rows(self, user_id: str) -> dict[str, Any]:
        state = self._read_state()
        rows: dict[str, Any] = state.get("snapshots", {}).get(user_id, {})
        return rows

    @staticmethod
    def _parse_row(raw: dict[str, Any]) -> StatsSnapshot:
        try:
            return StatsSnapshot.model_validate(raw)
        except ValidationError as e:
            raise SnapshotStoreError(f"Malformed snapshot row: {e}") from e

    def save_snapshot(self, snapshot: StatsSnapshot) -> StatsSnapshot:
        """Insert or overwrite the snapshot for (user, date).

        Args:
            snapshot: Snapshot to store

        Returns:
            The stored snapshot, with created_at filled in
        """
        key = snapshot.snapshot_date.isoformat()
        with self.lock:
            state = self._read_state()
            user_rows = state.setdefault("snapshots", {}).setdefault(snapshot.user_id, {})

            existing = user_rows.get(key)
            created_at = snapshot.created_at
            if created_at is None:
                created_at = (
                    datetime.fromisoformat(existing["created_at"])
                    if existing and existing.get("created_at")
                    else datetime.now(UTC)
                )
            stored = snapshot.model_copy(update={"created_at": created_at})
            user_rows[key] = stored.model_dump(mode="json")

            self._write_state(state)
        logger.info(
            "snapshot.saved",
            user_id=snapshot.user_id,
            snapshot_date=key,
            replaced=existing is not None,
        )
        return stored

    def get_snapshot_for_date(self, user_id: str, snapshot_date: date) -> StatsSnapshot | None:
        """Get the snapshot for an exact date.

        Args:
            user_id: User identifier
            snapshot_date: Date to look up

        Returns:
            Snapshot, or None if no snapshot exists for that date
        """
        raw = self._user_rows(user_id).get(snapshot_date.isoformat())
        if raw is None:
            return None
        return self._parse_row(raw)

    def get_previous_snapshot(self, user_id: str, before_date: date) -> StatsSnapshot | None:
        """Get the most recent snapshot strictly before a date.

        Args:
            user_id: User identifier
            before_date: Exclusive upper bound

        Returns:
            Snapshot, or None when there is no history yet
        """
        rows = self._user_rows(user_id)
        bound = before_date.isoformat()
        # ISO dates sort lexicographically in date order
        earlier = [key for key in rows if key < bound]
        if not earlier:
            return None
        return self._parse_row(rows[max(earlier)])

    def list_snapshots(self, user_id: str, since: date | None = None) -> list[StatsSnapshot]:
        """List a user's snapshots in date order.

        Args:
            user_id: User identifier
            since: Optional inclusive lower bound

        Returns:
            Snapshots sorted by date ascending
        """
        rows = self._user_rows(user_id)
        keys = sorted(rows)
        if since is not None:
            keys = [key for key in keys if key >= since.isoformat()]
        return [self._parse_row(rows[key]) for key in keys]
