"""
SX-EW Heap Leach Calculator - application entry point.

FastAPI application serving the tabbed front end (static files, when built)
and the calculation API.
"""
import json
import os
import re
import logging
from datetime import datetime
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse, JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from sxew_app.api.routes import api_router

logging.basicConfig(
    level=os.environ.get("SXEW_LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("sxew-calculator")

# ---------------------------------------------------------------------------
# Snake_case → camelCase API response middleware
# ---------------------------------------------------------------------------

_SNAKE_RE = re.compile(r"_([a-z])")


def _to_camel(snake: str) -> str:
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), snake)


def _convert_keys(obj):
    """Recursively convert dict keys from snake_case to camelCase
    and serialize datetime objects to ISO 8601 strings."""
    if isinstance(obj, dict):
        return {_to_camel(k): _convert_keys(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_keys(item) for item in obj]
    if isinstance(obj, datetime):
        return obj.isoformat()
    return obj


class CamelCaseMiddleware(BaseHTTPMiddleware):
    """Converts JSON API responses from snake_case to camelCase."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if not request.url.path.startswith("/api/"):
            return response

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response

        body_chunks = []
        async for chunk in response.body_iterator:
            if isinstance(chunk, bytes):
                body_chunks.append(chunk)
            else:
                body_chunks.append(chunk.encode("utf-8"))
        body = b"".join(body_chunks)

        try:
            data = json.loads(body)
            new_body = json.dumps(_convert_keys(data), default=str)
            headers = dict(response.headers)
            headers.pop("content-length", None)
            return Response(
                content=new_body,
                status_code=response.status_code,
                headers=headers,
                media_type="application/json",
            )
        except (json.JSONDecodeError, TypeError):
            return Response(
                content=body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=content_type,
            )


app = FastAPI(
    title="SX-EW Heap Leach Calculator",
    description="Parametric mass balance, equipment sizing and cost model for copper heap leach SX-EW plants",
    version="1.0.0",
)

app.add_middleware(CamelCaseMiddleware)
app.include_router(api_router)

STATIC_DIR = Path(os.environ.get("SXEW_STATIC_DIR", Path(__file__).parent / "static"))

if STATIC_DIR.exists():
    app.mount("/assets", StaticFiles(directory=str(STATIC_DIR / "assets")), name="assets")

    @app.get("/{full_path:path}")
    async def serve_spa(request: Request, full_path: str):
        if full_path.startswith("api/"):
            return JSONResponse(status_code=404, content={"error": "Not found"})

        file_path = STATIC_DIR / full_path
        if file_path.exists() and file_path.is_file():
            return FileResponse(str(file_path))

        return FileResponse(str(STATIC_DIR / "index.html"))
else:
    logger.warning("Static directory not found at %s; serving the API only", STATIC_DIR)

    @app.get("/")
    async def root():
        return {
            "status": "running",
            "message": "SX-EW calculator API is running. Frontend static files not found.",
            "docs": "/docs",
        }


def run():
    import uvicorn
    uvicorn.run(
        app,
        host=os.environ.get("SXEW_HOST", "0.0.0.0"),
        port=int(os.environ.get("SXEW_PORT", "8000")),
    )


if __name__ == "__main__":
    run()
