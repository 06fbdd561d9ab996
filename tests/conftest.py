"""Pytest configuration and shared fixtures"""
import os
from pathlib import Path

import pytest

from picturemap.errors import ToolError
from picturemap.exif import Coordinates
from picturemap.indexer import PictureIndex
from picturemap.snapshot import PictureSnapshot


class FakeTools:
    """In-process stand-in for convert/exiftool that records every call."""

    def __init__(self, locations=None):
        self.locations = dict(locations or {})   # canonical filename -> Coordinates
        self.fail_convert: set[str] = set()
        self.fail_extract: set[str] = set()
        self.skip_output: set[str] = set()       # convert "succeeds" without writing dst
        self.convert_calls: list[str] = []
        self.extract_calls: list[str] = []

    def convert(self, src: Path, dst: Path) -> None:
        self.convert_calls.append(src.name)
        if src.name in self.fail_convert:
            raise ToolError(["convert", str(src), str(dst)], "exit status 1")
        if src.name in self.skip_output:
            return
        dst.write_bytes(src.read_bytes())

    def extract_location(self, path: Path) -> Coordinates:
        self.extract_calls.append(path.name)
        if path.name in self.fail_extract:
            raise ToolError(["exiftool", str(path)], "bad latitude ''")
        return self.locations.get(path.name, Coordinates(0.0, 0.0))


def touch_later(p: Path, seconds: int = 10) -> None:
    """Push a file's mtime forward so it reads as modified."""
    st = p.stat()
    os.utime(p, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture
def pictures_dir(tmp_path):
    d = tmp_path / "pictures"
    d.mkdir()
    return d


@pytest.fixture
def tools():
    return FakeTools({
        "a.png": Coordinates(48.858370, 2.294481),
        "c.png": Coordinates(-33.856784, 151.215297),
    })


@pytest.fixture
def index(pictures_dir, tools):
    return PictureIndex(pictures_dir, tools)


@pytest.fixture
def snapshot():
    return PictureSnapshot()
