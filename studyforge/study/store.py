"""
Artifact Store.

One independently nullable slot per artifact kind plus the per-section
illustration map of the current summary.

Illustration sub-calls complete on worker threads, so every mutation goes
through a single lock. Each Summary generation opens a new illustration
*round*; a write tagged with an older round is dropped, which keeps a slow
sub-call from a superseded summary out of the current map.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from studyforge.core.logging import get_logger
from studyforge.study.artifacts import Illustration
from studyforge.study.models import ArtifactKind

logger = get_logger(__name__)


class ArtifactStore:
    """Thread-safe keyed container for generated artifacts."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slots: Dict[ArtifactKind, Any] = {}
        self._round = 0
        self._illustrations: Dict[int, Illustration] = {}

    def get(self, kind: ArtifactKind) -> Optional[Any]:
        """Payload stored for kind, or None if not generated yet."""
        with self._lock:
            return self._slots.get(kind)

    def has(self, kind: ArtifactKind) -> bool:
        with self._lock:
            return kind in self._slots

    def put(self, kind: ArtifactKind, payload: Any) -> None:
        """Replace the slot for kind wholesale."""
        if payload is None:
            raise ValueError("Cannot store an empty payload")
        with self._lock:
            self._slots[kind] = payload

    @property
    def illustration_round(self) -> int:
        with self._lock:
            return self._round

    def discard_illustrations(self) -> int:
        """Drop the illustration map and invalidate in-flight writes."""
        with self._lock:
            self._round += 1
            self._illustrations = {}
            return self._round

    def begin_illustration_round(self, count: int) -> int:
        """
        Start a new round with `count` pending sections.

        Returns:
            Round token to pass to set_illustration()
        """
        if count < 0:
            raise ValueError(f"Section count must be >= 0, got {count}")
        with self._lock:
            self._round += 1
            self._illustrations = {i: Illustration.pending() for i in range(count)}
            return self._round

    def set_illustration(
        self, round_id: int, index: int, illustration: Illustration
    ) -> bool:
        """
        Record the outcome for one section.

        Returns:
            False if the write was dropped (stale round or unknown index)
        """
        with self._lock:
            if round_id != self._round:
                logger.debug(
                    "Dropped stale illustration",
                    round=round_id,
                    current=self._round,
                    index=index,
                )
                return False
            if index not in self._illustrations:
                return False
            self._illustrations[index] = illustration
            return True

    def illustrations(self) -> Dict[int, Illustration]:
        """Snapshot of the current illustration map."""
        with self._lock:
            return dict(self._illustrations)

    def pending_illustrations(self) -> int:
        with self._lock:
            return sum(1 for i in self._illustrations.values() if not i.status.settled)

    def clear(self) -> None:
        """Empty every slot (a new document was loaded)."""
        with self._lock:
            self._slots.clear()
            self._round += 1
            self._illustrations = {}
