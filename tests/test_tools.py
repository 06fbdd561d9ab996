import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from picturemap.convert import convert_image
from picturemap.errors import ToolError
from picturemap.exif import Coordinates, extract_location, parse_coordinate, parse_exiftool_output
from picturemap.tools import ExternalTools


def _completed(cmd, returncode=0, stdout="", stderr=""):
    # subprocess runs in bytes mode
    return subprocess.CompletedProcess(cmd, returncode, stdout=stdout.encode(), stderr=stderr.encode())


def _exiftool_json(**record):
    return json.dumps([{"SourceFile": "a.png", **record}])


class TestParseExiftoolOutput:
    CMD = ["exiftool", "-c", "%+.24f", "-j", "a.png"]

    def test_signed_decimal_strings(self):
        out = _exiftool_json(GPSLatitude="+48.858370000000000000000000", GPSLongitude="-2.294481000000000000000000")
        assert parse_exiftool_output(self.CMD, out) == Coordinates(48.85837, -2.294481)

    def test_numbers_are_accepted(self):
        out = _exiftool_json(GPSLatitude=1.5, GPSLongitude=0)
        assert parse_exiftool_output(self.CMD, out) == Coordinates(1.5, 0.0)

    def test_missing_gps_fields(self):
        with pytest.raises(ToolError, match="latitude"):
            parse_exiftool_output(self.CMD, _exiftool_json())

    def test_unparsable_longitude(self):
        out = _exiftool_json(GPSLatitude="+1.0", GPSLongitude="12 deg 30' 0.00\" E")
        with pytest.raises(ToolError, match="longitude"):
            parse_exiftool_output(self.CMD, out)

    @pytest.mark.parametrize("stdout", ["", "not json", "{}", "[]", json.dumps([{}, {}]), json.dumps(["x"])])
    def test_malformed_output(self, stdout):
        with pytest.raises(ToolError):
            parse_exiftool_output(self.CMD, stdout)


@pytest.mark.parametrize("value,expected", [
    ("+1.25", 1.25),
    ("-0", 0.0),
    (3, 3.0),
    ("nan", None),
    ("inf", None),
    (True, None),
    (None, None),
    ("", None),
])
def test_parse_coordinate(value, expected):
    assert parse_coordinate(value) == expected


def test_extract_location_runs_exiftool_with_coordinate_format():
    stdout = _exiftool_json(GPSLatitude="+10.5", GPSLongitude="-20.25")
    with patch("picturemap.exif.subprocess.run", return_value=_completed([], stdout=stdout)) as run:
        coords = extract_location(Path("/pics/a.png"), exiftool_bin="/usr/bin/exiftool", timeout_s=5)

    assert coords == Coordinates(10.5, -20.25)
    args, kwargs = run.call_args
    assert args[0] == ["/usr/bin/exiftool", "-c", "%+.24f", "-j", "/pics/a.png"]
    assert kwargs["timeout"] == 5


def test_extract_location_nonzero_exit():
    with patch("picturemap.exif.subprocess.run", return_value=_completed([], returncode=1, stderr="Error: File not found")):
        with pytest.raises(ToolError, match="exit status 1"):
            extract_location(Path("/pics/a.png"))


def test_extract_location_missing_executable():
    with patch("picturemap.exif.subprocess.run", side_effect=FileNotFoundError("exiftool")):
        with pytest.raises(ToolError, match="could not start"):
            extract_location(Path("/pics/a.png"))


def test_extract_location_timeout():
    with patch("picturemap.exif.subprocess.run", side_effect=subprocess.TimeoutExpired("exiftool", 1)):
        with pytest.raises(ToolError, match="timed out"):
            extract_location(Path("/pics/a.png"), timeout_s=1)


def test_convert_image_passes_both_paths():
    with patch("picturemap.convert.subprocess.run") as run:
        convert_image(Path("/pics/a.jpg"), Path("/pics/a.png"), convert_bin="magick", timeout_s=7)

    args, kwargs = run.call_args
    assert args[0] == ["magick", "/pics/a.jpg", "/pics/a.png"]
    assert kwargs["check"] is True
    assert kwargs["timeout"] == 7


@pytest.mark.parametrize("error,message", [
    (subprocess.CalledProcessError(1, "convert", stderr=b"no decode delegate"), "no decode delegate"),
    (subprocess.TimeoutExpired("convert", 7), "timed out"),
    (FileNotFoundError("convert"), "could not start"),
])
def test_convert_image_failures(error, message):
    with patch("picturemap.convert.subprocess.run", side_effect=error):
        with pytest.raises(ToolError, match=message) as exc:
            convert_image(Path("/pics/a.jpg"), Path("/pics/a.png"))
    assert exc.value.cmd == ["convert", "/pics/a.jpg", "/pics/a.png"]


def test_external_tools_from_cfg():
    from picturemap.config import ToolsCfg

    tools = ExternalTools.from_cfg(ToolsCfg(convert_bin="magick", exiftool_bin="et", timeout_s=3, coord_format="%.6f"))
    stdout = _exiftool_json(GPSLatitude="1.000000", GPSLongitude="2.000000")
    with patch("picturemap.convert.subprocess.run") as conv, \
         patch("picturemap.exif.subprocess.run", return_value=_completed([], stdout=stdout)) as exif:
        tools.convert(Path("a.jpg"), Path("a.png"))
        coords = tools.extract_location(Path("a.png"))

    assert conv.call_args[0][0] == ["magick", "a.jpg", "a.png"]
    assert exif.call_args[0][0] == ["et", "-c", "%.6f", "-j", "a.png"]
    assert exif.call_args[1]["timeout"] == 3
    assert coords == Coordinates(1.0, 2.0)


def _script(tmp_path, name, body):
    p = tmp_path / name
    p.write_text("#!/bin/sh\n" + body)
    p.chmod(0o755)
    return p


def test_extract_location_latin1_error_output(tmp_path):
    exiftool = _script(tmp_path, "exiftool", "printf 'Error: bad file \\351\\n' >&2\nexit 1\n")
    with pytest.raises(ToolError, match="exit status 1: Error: bad file"):
        extract_location(tmp_path / "b.png", exiftool_bin=str(exiftool))


def test_extract_location_latin1_source_file_in_output(tmp_path):
    body = "printf '[{\"SourceFile\": \"caf\\351.png\", \"GPSLatitude\": \"+1.5\", \"GPSLongitude\": \"-2.5\"}]'\n"
    exiftool = _script(tmp_path, "exiftool", body)
    assert extract_location(tmp_path / "b.png", exiftool_bin=str(exiftool)) == Coordinates(1.5, -2.5)
