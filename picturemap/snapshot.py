from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Picture:
    filename: str
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"filename": self.filename, "latitude": self.latitude, "longitude": self.longitude}


class PictureSnapshot:
    """
    Published picture list shared by the scanner (sole writer) and HTTP handlers.
    The lock only guards the swap/copy of the list, never I/O.
    """
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pictures: list[Picture] = []
        self._revision = 0

    def publish(self, pictures: Iterable[Picture]) -> None:
        fresh = list(pictures)
        with self._lock:
            self._pictures = fresh
            self._revision += 1

    def pictures(self) -> list[Picture]:
        with self._lock:
            return list(self._pictures)

    def read(self) -> tuple[int, list[Picture]]:
        """Revision and pictures taken under the same lock."""
        with self._lock:
            return self._revision, list(self._pictures)

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision
