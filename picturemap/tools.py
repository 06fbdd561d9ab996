from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .constants import DEFAULT_TOOL_TIMEOUT_S, EXIFTOOL_COORD_FORMAT
from .convert import convert_image
from .exif import Coordinates, extract_location


class PictureTools(Protocol):
    """The two external collaborators of the indexer.

    Both calls block the caller and raise `ToolError` on any failure.
    """

    def convert(self, src: Path, dst: Path) -> None: ...

    def extract_location(self, path: Path) -> Coordinates: ...


class ExternalTools:
    """PictureTools backed by ImageMagick `convert` and `exiftool` subprocesses."""

    def __init__(self, convert_bin="convert", exiftool_bin="exiftool",
                 timeout_s=DEFAULT_TOOL_TIMEOUT_S, coord_format=EXIFTOOL_COORD_FORMAT):
        self.convert_bin = convert_bin
        self.exiftool_bin = exiftool_bin
        self.timeout_s = timeout_s
        self.coord_format = coord_format

    @classmethod
    def from_cfg(cls, tools_cfg) -> "ExternalTools":
        return cls(
            convert_bin=tools_cfg.convert_bin,
            exiftool_bin=tools_cfg.exiftool_bin,
            timeout_s=tools_cfg.timeout_s,
            coord_format=tools_cfg.coord_format,
        )

    def convert(self, src: Path, dst: Path) -> None:
        convert_image(src, dst, convert_bin=self.convert_bin, timeout_s=self.timeout_s)

    def extract_location(self, path: Path) -> Coordinates:
        return extract_location(
            path,
            exiftool_bin=self.exiftool_bin,
            coord_format=self.coord_format,
            timeout_s=self.timeout_s,
        )
