import logging
import os
import sys

import uvicorn

from .config import AppCfg, cfg_path
from .indexer import PictureIndex
from .scanner import PictureScanner
from .server import create_app
from .snapshot import PictureSnapshot
from .tools import ExternalTools

log = logging.getLogger("picturemap")


def setup_logging(level: str = "INFO") -> None:
    # LOGLEVEL in the environment wins over the config file
    level = os.environ.get("LOGLEVEL", level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    )


def main():
    cfg = AppCfg.load(cfg_path())
    setup_logging(cfg.logging.level)

    cfg.paths.pictures.mkdir(parents=True, exist_ok=True)

    snapshot = PictureSnapshot()
    index = PictureIndex(
        cfg.paths.pictures,
        ExternalTools.from_cfg(cfg.tools),
        evict_missing=cfg.scan.evict_missing,
    )

    app = create_app(cfg, snapshot)
    server = uvicorn.Server(uvicorn.Config(app, host=cfg.server.host, port=cfg.server.port, log_level="warning"))

    def on_fatal(e):
        # no source of truth left; take the HTTP server down with the scanner
        server.should_exit = True

    scanner = PictureScanner(index, snapshot, interval_s=cfg.scan.interval_seconds, on_fatal=on_fatal)
    scanner.start()

    log.info(f"serving on http://{cfg.server.host}:{cfg.server.port}")
    try:
        server.run()
    finally:
        scanner.stop(timeout=5)

    if scanner.error:
        sys.exit(1)

if __name__ == "__main__":
    main()
