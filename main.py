"""
Main API module for Shortit.

Responsibilities:
    - Expose REST endpoints to create, list, fetch, update and delete short URLs
    - Redirect short tokens to their destination
    - Translate allocator errors into HTTP status codes

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - In-memory storage by default; PostgreSQL when SHORTIT_STORAGE_BACKEND=postgres.
    - The allocator owns dedup, alias and uniqueness rules; routes only map
      requests and results to JSON.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from shortit.allocator.alias_allocator import AliasAllocator
from shortit.config import settings
from shortit.errors import (
    AliasConflict,
    NotFound,
    ShortitError,
    StorageUnavailable,
    ValidationError,
)
from shortit.schemas import CreateUrlRequest, UpdateUrlRequest
from shortit.storage.base import BaseStorage
from shortit.storage.storage_factory import get_storage

log = logging.getLogger("shortit")

# Most specific first; UniqueConstraintViolation is an AliasConflict.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFound, 404),
    (AliasConflict, 409),
    (StorageUnavailable, 503),
)


def status_for(exc: ShortitError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 500


def create_app(storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage (Optional[BaseStorage]): Backend to use; chosen from env when omitted.

    Returns:
        FastAPI: A fully configured application with its own storage and allocator.

    Why an app factory?
        - Enables per-test isolation in pytest.
        - Encourages dependency injection and easy swapping of implementations.
        - Avoids accidental global state across workers/processes.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title="Shortit",
        description="URL shortener with custom aliases and dedup by destination",
        docs_url="/docs",
    )

    if storage is None:
        storage = get_storage(ensure_schema=True)
    allocator = AliasAllocator(storage=storage)
    log.info("Shortit storage backend: %s", type(storage).__name__)

    # ----------------------------------------------------------------
    # Error translation
    # ----------------------------------------------------------------
    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {
                "location": err["loc"][0] if err.get("loc") else "body",
                "path": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "msg": err.get("msg", ""),
                "type": "field",
            }
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"errors": errors})

    @app.exception_handler(ShortitError)
    async def _shortit_error(request: Request, exc: ShortitError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status, content={"error": exc.code, "message": exc.message})

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/", response_class=PlainTextResponse)
    def index() -> str:
        return "Welcome to Shortit URL Shortner API"

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/urls")
    def create_url(req: CreateUrlRequest) -> Response:
        """
        Shorten a URL, optionally under a custom name.

        Returns:
            200 {"message", "data": {"id", "shortUrl"}}; the message tells a
            fresh alias apart from an existing one being returned.
            409 when the custom name is already in use.
        """
        try:
            result = allocator.create(req.originalUrl, req.customName)
        except AliasConflict:
            return JSONResponse(status_code=409, content={"message": "Custom name already in use"})

        message = "URL shortened successfully" if result.created else "Original URL already exists"
        return JSONResponse(
            {"message": message, "data": {"id": result.record.id, "shortUrl": result.record.alias}}
        )

    @app.get("/urls")
    def list_urls() -> List[Dict[str, Any]]:
        return [record.to_dict() for record in allocator.list()]

    @app.get("/urls/{record_id}")
    def get_url(record_id: str) -> Response:
        try:
            result = allocator.resolve(record_id.strip())
        except NotFound:
            return JSONResponse(status_code=404, content={"error": "url not found"})
        return JSONResponse(result.record.to_dict())

    @app.put("/urls/{record_id}")
    def update_url(record_id: str, req: UpdateUrlRequest) -> Response:
        try:
            result = allocator.update(record_id.strip(), req.originalUrl, req.customName)
        except NotFound:
            return JSONResponse(status_code=404, content={"error": "url not found"})
        except AliasConflict:
            return JSONResponse(status_code=409, content={"message": "Custom name already in use"})
        return JSONResponse({"message": "URL updated successfully", "data": result.record.to_dict()})

    @app.delete("/urls/{record_id}")
    def delete_url(record_id: str) -> Response:
        try:
            result = allocator.delete(record_id.strip())
        except NotFound:
            return JSONResponse(status_code=404, content={"error": "Original URL not found"})
        return JSONResponse({"message": "URL deleted successfully", "data": result.record.to_dict()})

    @app.get("/s/{token}")
    def redirect_alias(token: str, request: Request) -> Response:
        """
        Resolve a short token to its destination.

        Browsers (Accept: text/html) get a 302; API clients get JSON.
        """
        try:
            result = allocator.lookup(token)
        except NotFound:
            return JSONResponse(status_code=404, content={"error": "url not found"})

        accept = request.headers.get("accept", "").lower()
        if "text/html" in accept:
            return RedirectResponse(url=result.record.destination_url, status_code=302)
        return JSONResponse({"originalUrl": result.record.destination_url, "shortUrl": result.record.alias})

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
