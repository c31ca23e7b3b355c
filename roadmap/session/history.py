"""Bounded, newest-first history of roadmap snapshots."""
from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Union

from roadmap.config.models import Roadmap, Snapshot, copy_roadmap

logger = logging.getLogger(__name__)

MAX_SNAPSHOTS = 10


class RoadmapHistory:
    """Keeps at most ``limit`` deep-copied snapshots, newest first."""

    def __init__(self, limit: int = MAX_SNAPSHOTS) -> None:
        self.limit = limit
        self._snapshots: List[Snapshot] = []

    def save(self, roadmap: Optional[Roadmap], idea: str = "") -> Optional[Snapshot]:
        """Store a snapshot of ``roadmap``; ``None`` is ignored."""
        if roadmap is None:
            return None
        snapshot = Snapshot(data=copy_roadmap(roadmap), idea=idea)
        self._snapshots = [snapshot, *self._snapshots][: self.limit]
        logger.debug("Saved snapshot (%d sections, %d kept)", snapshot.section_count, len(self))
        return snapshot

    def get(self, index: int) -> Snapshot:
        return self._snapshots[index]

    def restore(self, which: Union[int, Snapshot]) -> Roadmap:
        """Return a fresh deep copy of a snapshot's roadmap."""
        snapshot = self.get(which) if isinstance(which, int) else which
        return copy_roadmap(snapshot.data)

    def clear(self) -> None:
        self._snapshots = []

    @property
    def snapshots(self) -> List[Snapshot]:
        return list(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(list(self._snapshots))
