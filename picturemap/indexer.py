from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ScanError, ToolError
from .snapshot import Picture
from .tools import PictureTools
from .utils import canonical_path, is_canonical, is_hidden

log = logging.getLogger(__name__)


@dataclass
class PictureFile:
    source_path: str
    filename: str          # canonical filename, served by /picture/{filename}
    latitude: float
    longitude: float
    mtime_ns: int          # canonical file mtime when metadata was extracted


@dataclass
class ScanStats:
    seen: int = 0
    converted: int = 0
    extracted: int = 0
    failed: int = 0
    evicted: int = 0


class PictureIndex:
    """
    Map of source path -> PictureFile for one pictures directory.

    Not thread-safe: only the scanner thread may call reconcile(). Readers go
    through the snapshot built by pictures().
    """
    def __init__(self, root: Path, tools: PictureTools, evict_missing: bool = False):
        self.root = Path(root).expanduser().absolute()
        self.tools = tools
        self.evict_missing = evict_missing
        self._files: dict[str, PictureFile] = {}

    def __len__(self) -> int:
        return len(self._files)

    def get(self, source_path) -> PictureFile | None:
        return self._files.get(str(source_path))

    def _list_files(self) -> list[Path]:
        try:
            with os.scandir(self.root) as it:
                entries = list(it)
        except OSError as e:
            raise ScanError(f"failed to read pictures directory {self.root}: {e}") from e

        files = []
        for entry in entries:
            if is_hidden(entry.name):
                continue
            try:
                # symlinks and directories are ignored
                if not entry.is_file(follow_symlinks=False):
                    continue
            except OSError as e:
                log.warning(f"failed to inspect {entry.path}: {e}")
                continue
            files.append(Path(entry.path))
        return files

    def reconcile(self) -> ScanStats:
        """One pass over the directory. Raises ScanError if it cannot be listed."""
        stats = ScanStats()
        files = self._list_files()
        # stems that have a non-canonical original; their .png is a conversion output
        originals = {p.stem for p in files if not is_canonical(p)}
        sources: set[str] = set()

        for p in files:
            if is_canonical(p) and p.stem in originals:
                # indexed under the original's key
                self._files.pop(str(p), None)
                continue
            stats.seen += 1
            sources.add(str(p))
            try:
                ok = self._reconcile_file(p, stats)
            except OSError as e:
                log.warning(f"failed to process {p}: {e}")
                ok = False
            if not ok:
                stats.failed += 1

        if self.evict_missing:
            for key in [k for k in self._files if k not in sources]:
                del self._files[key]
                stats.evicted += 1
            if stats.evicted:
                log.info(f"evicted {stats.evicted} missing pictures")
        return stats

    def _reconcile_file(self, src: Path, stats: ScanStats) -> bool:
        dst = canonical_path(src)
        if dst != src and not dst.exists():
            try:
                self.tools.convert(src, dst)
            except ToolError as e:
                log.warning(f"failed to convert {src}: {e}")
                return False
            stats.converted += 1

        try:
            mtime_ns = dst.stat().st_mtime_ns
        except OSError as e:
            log.warning(f"failed to stat {dst}: {e}")
            return False

        key = str(src)
        current = self._files.get(key)
        if current is None and dst == src:
            current = self._adopt_orphans(key, dst.name)
        if current is not None and mtime_ns <= current.mtime_ns:
            return True

        try:
            coords = self.tools.extract_location(dst)
        except ToolError as e:
            log.warning(f"failed to extract location from {dst}: {e}")
            return False

        self._files[key] = PictureFile(
            source_path=key,
            filename=dst.name,
            latitude=coords.latitude,
            longitude=coords.longitude,
            mtime_ns=mtime_ns,
        )
        stats.extracted += 1
        return True

    def _adopt_orphans(self, key: str, filename: str) -> PictureFile | None:
        """
        Move records left behind by a deleted original (a.jpg -> a.png) onto
        the canonical file's own key so the picture is published once.
        """
        adopted = None
        for other in [k for k, f in self._files.items() if k != key and f.filename == filename]:
            rec = self._files.pop(other)
            if adopted is None or rec.mtime_ns > adopted.mtime_ns:
                adopted = rec
        if adopted is not None:
            adopted.source_path = key
            self._files[key] = adopted
        return adopted

    def pictures(self) -> list[Picture]:
        return [
            Picture(filename=f.filename, latitude=f.latitude, longitude=f.longitude)
            for f in self._files.values()
        ]
