"""
Static file server for local development of the browser front end.

Serves files from STATIC_ROOT with extension-based content types and
caching disabled. Requests that resolve outside the root are rejected, as
are directory requests. Listens on 127.0.0.1 and the port given by PORT.
"""
from __future__ import annotations

import logging
import typing as t
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, Response

from event_reminder.config import PORT, STATIC_HOST, STATIC_ROOT
from event_reminder.log import configure_logging

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def mime_type_for(path: t.Union[str, Path]) -> str:
    """Content type for a file name, by lower-cased extension."""
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def resolve_request_path(root: Path, url_path: str) -> t.Optional[Path]:
    """Map a URL path onto the served directory.

    ``/`` maps to ``index.html``.

    :return: The absolute file path, or None if it escapes the root.
    """
    relative = url_path.lstrip("/") or "index.html"
    root = root.resolve()
    candidate = (root / relative).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


def create_app(root: t.Union[str, Path] = STATIC_ROOT) -> FastAPI:
    """Build the static file server for ``root``."""
    root = Path(root)
    app = FastAPI(title="Event Reminder Dev Server", docs_url=None, redoc_url=None, openapi_url=None)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info("%s %s -> %d", request.method, request.url.path, response.status_code)
        return response

    @app.get("/{url_path:path}")
    async def serve(url_path: str) -> Response:
        """Serve one file from the root directory."""
        file_path = resolve_request_path(root, url_path)
        if file_path is None:
            return HTMLResponse("<h1>403 - Forbidden</h1>", status_code=403)
        if file_path.is_dir():
            return HTMLResponse(
                "<h1>403 - Forbidden</h1><p>Cannot serve directories.</p>", status_code=403,
            )
        if not file_path.is_file():
            return HTMLResponse(
                "<h1>404 - File Not Found</h1><p>The requested file could not be found.</p>",
                status_code=404,
            )
        try:
            content = file_path.read_bytes()
        except OSError as e:
            logger.error("Error reading %s: %s", file_path, e)
            return HTMLResponse(f"<h1>500 - Server Error</h1><p>{e.strerror}</p>", status_code=500)

        return Response(content=content, media_type=mime_type_for(file_path), headers=NO_CACHE_HEADERS)

    return app


def run(port: int = PORT, root: t.Union[str, Path] = STATIC_ROOT) -> None:
    """Serve ``root`` until interrupted."""
    import uvicorn

    configure_logging()
    logger.info("Serving %s on http://%s:%d", Path(root).resolve(), STATIC_HOST, port)
    uvicorn.run(create_app(root), host=STATIC_HOST, port=port, log_level="warning")


if __name__ == "__main__":
    run()
