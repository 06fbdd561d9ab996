from dataclasses import dataclass, field
from pathlib import Path
import os
import yaml
from typing import Any, Dict

from .constants import (
    DEFAULT_CFG_PATH,
    DEFAULT_SCAN_INTERVAL_S,
    DEFAULT_TOOL_TIMEOUT_S,
    EXIFTOOL_COORD_FORMAT,
)

@dataclass
class PathsCfg:
    pictures: Path

@dataclass
class ServerCfg:
    host: str = "0.0.0.0"
    port: int = 8000

@dataclass
class ToolsCfg:
    convert_bin: str = "convert"
    exiftool_bin: str = "exiftool"
    timeout_s: float = DEFAULT_TOOL_TIMEOUT_S
    coord_format: str = EXIFTOOL_COORD_FORMAT

@dataclass
class ScanCfg:
    interval_seconds: float = DEFAULT_SCAN_INTERVAL_S
    evict_missing: bool = False  # drop records whose source file disappeared

@dataclass
class LoggingCfg:
    level: str = "INFO"

@dataclass
class AppCfg:
    paths: PathsCfg
    server: ServerCfg = field(default_factory=ServerCfg)
    tools: ToolsCfg = field(default_factory=ToolsCfg)
    scan: ScanCfg = field(default_factory=ScanCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)

    def validate(self) -> "AppCfg":
        if self.scan.interval_seconds <= 0:
            raise ValueError("scan.interval_seconds must be > 0")
        if self.tools.timeout_s <= 0:
            raise ValueError("tools.timeout_s must be > 0")
        if not 0 < self.server.port < 65536:
            raise ValueError("server.port must be between 1 and 65535")
        return self

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "AppCfg":
        p = data.get("paths") or {}
        if not p.get("pictures"):
            raise ValueError("paths.pictures is required")
        paths = PathsCfg(pictures=Path(p["pictures"]).expanduser())

        server = ServerCfg(**(data.get("server") or {}))

        t = data.get("tools") or {}
        tools = ToolsCfg(
        convert_bin=str(t.get("convert_bin", "convert")),
        exiftool_bin=str(t.get("exiftool_bin", "exiftool")),
        timeout_s=float(t.get("timeout_s", DEFAULT_TOOL_TIMEOUT_S)),
        coord_format=str(t.get("coord_format", EXIFTOOL_COORD_FORMAT)),
        )

        s = data.get("scan") or {}
        scan = ScanCfg(
        interval_seconds=float(s.get("interval_seconds", DEFAULT_SCAN_INTERVAL_S)),
        evict_missing=bool(s.get("evict_missing", False)),
        )

        lg = data.get("logging") or {}
        logging_cfg = LoggingCfg(level=str(lg.get("level", "INFO")).upper())

        return AppCfg(
            paths=paths,
            server=server,
            tools=tools,
            scan=scan,
            logging=logging_cfg,
            ).validate()

    @staticmethod
    def load(path: Path) -> "AppCfg":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return AppCfg.from_dict(data)

    @staticmethod
    def from_pictures_dir(pictures: Path) -> "AppCfg":
        return AppCfg(paths=PathsCfg(pictures=Path(pictures).expanduser()))


def cfg_path() -> Path:
    return Path(os.environ.get("PICTUREMAP_CONFIG", DEFAULT_CFG_PATH))
