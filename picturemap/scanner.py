from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from .constants import DEFAULT_SCAN_INTERVAL_S
from .errors import ScanError
from .indexer import PictureIndex, ScanStats
from .snapshot import PictureSnapshot

log = logging.getLogger(__name__)


class PictureScanner:
    """
    Background thread that keeps a PictureIndex in sync with the pictures
    directory and publishes its content to a PictureSnapshot.

    The first pass runs as soon as the thread starts, then once every
    `interval_s` until stop() is called. The index is only ever touched from
    that thread (or from run_once() when no thread is running).
    """
    def __init__(
        self,
        index: PictureIndex,
        snapshot: PictureSnapshot,
        interval_s: float = DEFAULT_SCAN_INTERVAL_S,
        on_fatal: Optional[Callable[[ScanError], None]] = None,
    ):
        self.index = index
        self.snapshot = snapshot
        self.interval_s = interval_s
        self.on_fatal = on_fatal
        self.error: ScanError | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_once(self) -> ScanStats:
        t0 = time.monotonic()
        stats = self.index.reconcile()
        self.snapshot.publish(self.index.pictures())
        log.info(
            f"scan done in {time.monotonic() - t0:.2f}s: {stats.seen} files, "
            f"{stats.converted} converted, {stats.extracted} extracted, "
            f"{stats.failed} failed, {len(self.index)} indexed"
        )
        return stats

    def _loop(self):
        while not self._stop.is_set():
            try:
                self.run_once()
            except ScanError as e:
                self.error = e
                log.critical(f"{e}; stopping scanner")
                if self.on_fatal:
                    self.on_fatal(e)
                return
            except Exception:
                # keep the last published snapshot and retry next interval
                log.exception("scan pass failed")
            self._stop.wait(self.interval_s)

    def start(self) -> "PictureScanner":
        if self._thread and self._thread.is_alive():
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="picture-scanner", daemon=True)
        self._thread.start()
        log.info(f"scanning {self.index.root} every {self.interval_s:g}s")
        return self

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())
