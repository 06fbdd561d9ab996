# picturemap/server.py
import json
import logging
from pathlib import Path

from fastapi import FastAPI, Header, HTTPException
from fastapi import Path as FPath
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response

from .config import AppCfg
from .constants import PICTURES_FORMAT
from .snapshot import PictureSnapshot
from .utils import base_name

log = logging.getLogger(__name__)


def _picture_path(root: Path, filename: str) -> Path:
    # Prevent traversal: only the last component is ever looked up
    name = base_name(filename)
    if not name.endswith(PICTURES_FORMAT):
        raise HTTPException(404, "picture not found")
    p = root / name
    if not p.is_file():
        raise HTTPException(404, "picture not found")
    return p


def create_app(cfg: AppCfg, snapshot: PictureSnapshot) -> FastAPI:
    """Build the HTTP app around an already-populated (or empty) snapshot."""
    app = FastAPI(title="PictureMap Server")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    pictures_dir = Path(cfg.paths.pictures)

    @app.get("/api/pictures")
    def list_pictures(if_none_match: str | None = Header(default=None)):
        rev, pictures = snapshot.read()
        etag = f'W/"pictures-{rev}"'
        if if_none_match and etag in [t.strip() for t in if_none_match.split(",")]:
            return Response(status_code=304, headers={"ETag": etag})
        try:
            body = json.dumps([p.to_dict() for p in pictures], allow_nan=False)
        except ValueError as e:
            log.error(f"failed to encode pictures: {e}")
            raise HTTPException(500, "failed to encode pictures")
        resp = Response(content=body, media_type="application/json")
        resp.headers["ETag"] = etag
        return resp

    @app.get("/picture/{filename:path}")
    def serve_picture(filename: str = FPath(...)):
        """
        Stream one canonical picture straight from the pictures directory.
        """
        p = _picture_path(pictures_dir, filename)
        return FileResponse(str(p), media_type="image/png")

    return app
