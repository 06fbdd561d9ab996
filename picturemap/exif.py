"""GPS extraction through exiftool."""

from __future__ import annotations

import json
import math
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .constants import DEFAULT_TOOL_TIMEOUT_S, EXIFTOOL_COORD_FORMAT
from .errors import ToolError


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


def parse_coordinate(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_exiftool_output(cmd: list[str], stdout: str) -> Coordinates:
    try:
        payload = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise ToolError(cmd, f"unparsable output: {e}") from e
    if not isinstance(payload, list) or len(payload) != 1 or not isinstance(payload[0], dict):
        raise ToolError(cmd, "expected exactly one record")

    record = payload[0]
    latitude = parse_coordinate(record.get("GPSLatitude"))
    if latitude is None:
        raise ToolError(cmd, f"bad latitude {record.get('GPSLatitude')!r}")
    longitude = parse_coordinate(record.get("GPSLongitude"))
    if longitude is None:
        raise ToolError(cmd, f"bad longitude {record.get('GPSLongitude')!r}")
    return Coordinates(latitude=latitude, longitude=longitude)


def extract_location(
    path: Path,
    *,
    exiftool_bin: str = "exiftool",
    coord_format: str = EXIFTOOL_COORD_FORMAT,
    timeout_s: float = DEFAULT_TOOL_TIMEOUT_S,
) -> Coordinates:
    cmd = [exiftool_bin, "-c", coord_format, "-j", str(path)]
    try:
        result = subprocess.run(cmd, capture_output=True, check=False, timeout=timeout_s)
    except subprocess.TimeoutExpired as e:
        raise ToolError(cmd, f"timed out after {timeout_s}s") from e
    except OSError as e:
        raise ToolError(cmd, f"could not start: {e}") from e
    # exiftool echoes file names in whatever encoding they have on disk
    stdout = (result.stdout or b"").decode(errors="replace")
    stderr = (result.stderr or b"").decode(errors="replace").strip()
    if result.returncode != 0:
        raise ToolError(cmd, f"exit status {result.returncode}: {stderr}")
    return parse_exiftool_output(cmd, stdout)
