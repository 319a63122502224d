"""Named manifest snapshots.

Snapshots let a user keep several manifests around and re-run the
analysis on any of them later. They are stored newest first in a single
JSON file; saving beyond :data:`~depradar.constants.MAX_SNAPSHOTS` drops
the oldest ones.

File layout::

    [
      {"name": "before-upgrade", "content": "{...}", "created_at": 1718000000.0},
      ...
    ]
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

from depradar.exceptions import SnapshotError
from depradar.utils.filesystem import PathLike, safe_read_file, safe_write_file
from depradar.utils.logger import get_logger
from depradar.constants import MAX_SNAPSHOTS

logger = get_logger("snapshots")

__all__ = ["Snapshot", "SnapshotStore"]


@dataclass(frozen=True)
class Snapshot:
    """A saved manifest.

    Attributes:
        name: User-supplied label.
        content: Raw manifest text.
        created_at: Save time, seconds since the epoch.
    """

    name: str
    content: str
    created_at: float

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            name=str(data["name"]),
            content=str(data["content"]),
            created_at=float(data["created_at"]),
        )


class SnapshotStore:
    """JSON-file backed list of :class:`Snapshot` entries, newest first.

    Args:
        path: Location of the snapshot file; created on first save.
        limit: Maximum number of snapshots kept.
        clock: Time source, seconds since the epoch.
    """

    def __init__(
        self,
        path: PathLike,
        *,
        limit: int = MAX_SNAPSHOTS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path)
        self.limit = limit
        self._clock = clock

    def list(self) -> List[Snapshot]:
        """Return every snapshot, newest first."""
        if not self.path.exists():
            return []

        text = safe_read_file(self.path)
        if not text.strip():
            return []

        try:
            raw = json.loads(text)
            return [Snapshot.from_json(item) for item in raw]
        except (ValueError, TypeError, KeyError) as exc:
            raise SnapshotError(
                f"Snapshot file is corrupted: {exc}",
                details={"path": str(self.path)},
            ) from exc

    def save(self, name: str, content: str) -> Snapshot:
        """Store *content* under *name* as the newest snapshot.

        Raises:
            SnapshotError: *name* or *content* is blank.
        """
        name = name.strip()
        if not name:
            raise SnapshotError("Please add a snapshot name.")
        if not content.strip():
            raise SnapshotError("Nothing to save.")

        snapshot = Snapshot(name=name, content=content, created_at=self._clock())
        snapshots = [snapshot] + self.list()
        dropped = len(snapshots) - self.limit
        if dropped > 0:
            logger.info("Dropping %d oldest snapshot(s)", dropped)

        self._write(snapshots[: self.limit])
        return snapshot

    def get(self, index: int) -> Snapshot:
        """Return the snapshot at *index* (``0`` is the newest)."""
        snapshots = self.list()
        return snapshots[self._check_index(index, snapshots)]

    def find(self, name: str) -> Optional[Snapshot]:
        """Return the newest snapshot called *name*, if any."""
        for snapshot in self.list():
            if snapshot.name == name:
                return snapshot
        return None

    def delete(self, index: int) -> Snapshot:
        """Remove and return the snapshot at *index*."""
        snapshots = self.list()
        removed = snapshots.pop(self._check_index(index, snapshots))
        self._write(snapshots)
        return removed

    @staticmethod
    def _check_index(index: int, snapshots: List[Snapshot]) -> int:
        if not 0 <= index < len(snapshots):
            raise SnapshotError(
                f"No snapshot at position {index + 1}",
                details={"available": len(snapshots)},
            )
        return index

    def _write(self, snapshots: List[Snapshot]) -> None:
        safe_write_file(
            self.path,
            json.dumps([asdict(s) for s in snapshots], indent=2),
        )
