"""
Static-file responder for the browser client.

Serves ``/`` as the default document and any other path as a file under the
public root. Missing files, and paths that resolve outside the root, get a
plain-text 404.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import uvicorn
from fastapi import FastAPI
from fastapi.responses import FileResponse, PlainTextResponse
from starlette.responses import Response

from RoomChat import __version__
from RoomChat.config import config

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".html": "text/html",
    ".js": "application/javascript",
    ".css": "text/css",
}
DEFAULT_CONTENT_TYPE = "text/plain"


def resolve_public_file(public_dir: Union[str, Path], request_path: str) -> Optional[Path]:
    """
    Map a request path to a file under the public root.

    Args:
        public_dir: Public root directory
        request_path: URL path without query string

    Returns:
        The file path, or None if it does not exist or escapes the root
    """
    root = Path(public_dir).resolve()
    relative = request_path.lstrip("/") or config.DEFAULT_DOCUMENT
    candidate = (root / relative).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    if not candidate.is_file():
        return None
    return candidate


def create_app(public_dir: Union[str, Path, None] = None) -> FastAPI:
    """
    Build the static-file application.

    Args:
        public_dir: Directory to serve (defaults to Config.PUBLIC_DIR)
    """
    root = Path(public_dir or config.PUBLIC_DIR)
    web_app = FastAPI(title="RoomChat", version=__version__, docs_url=None, redoc_url=None, openapi_url=None)

    @web_app.get("/{path:path}")
    async def serve_static(path: str) -> Response:
        file_path = resolve_public_file(root, path)
        if file_path is None:
            logger.debug("Static file not found: /%s", path)
            return PlainTextResponse("Not found", status_code=404)
        content_type = CONTENT_TYPES.get(file_path.suffix.lower(), DEFAULT_CONTENT_TYPE)
        return FileResponse(file_path, media_type=content_type)

    return web_app


app = create_app()


def run(host: str = config.DEFAULT_HOST, port: int = config.DEFAULT_HTTP_PORT) -> None:
    """
    Run the static-file application with Uvicorn.

    Args:
        host: Host to bind to
        port: Port for the web
    """
    logger.info("Serving static client from %s on http://%s:%s", config.PUBLIC_DIR, host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)
