"""
FastAPI REST API for the Items Service.

Provides HTTP endpoints for creating, reading, partially updating and
deleting items stored in DynamoDB.
"""

from typing import Any

import structlog
from fastapi import Body, Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from items_service import __version__
from items_service.config import get_settings
from items_service.errors import (
    INVALID_BODY_MESSAGE,
    MISSING_BODY_MESSAGE,
    BackendExecutionError,
    InvalidRequest,
    ItemNotFound,
    ItemsServiceError,
)
from items_service.services.dynamodb import ItemTableService

logger = structlog.get_logger(__name__)

CORS_ALLOW_HEADERS = [
    "Content-Type",
    "X-Amz-Date",
    "Authorization",
    "X-Api-Key",
    "X-Amz-Security-Token",
    "X-Amz-User-Agent",
]
CORS_ALLOW_METHODS = ["OPTIONS", "GET", "PUT", "POST", "PATCH", "DELETE"]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    services: dict[str, str]


# Lazily built so importing the module never touches AWS
_service: ItemTableService | None = None


def get_item_service() -> ItemTableService:
    """Get the item service instance."""
    global _service
    if _service is None:
        _service = ItemTableService.from_settings(get_settings())
    return _service


def _require_body(payload: dict[str, Any] | None) -> dict[str, Any]:
    if payload is None:
        raise InvalidRequest(MISSING_BODY_MESSAGE)
    return payload


# Create FastAPI app
app = FastAPI(
    title="Items Service API",
    description="CRUD API over a DynamoDB items table",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
)


@app.exception_handler(ItemsServiceError)
async def handle_service_error(request: Request, exc: ItemsServiceError) -> JSONResponse:
    """Translate service errors into HTTP responses."""
    if isinstance(exc, BackendExecutionError):
        logger.error(
            "Request failed on backend",
            path=request.url.path,
            operation=exc.operation,
            cause=str(exc.cause),
        )
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            error=type(exc).__name__,
            detail=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unparseable or non-object bodies as InvalidRequest."""
    logger.info("Request body rejected", path=request.url.path, errors=len(exc.errors()))
    return await handle_service_error(request, InvalidRequest(INVALID_BODY_MESSAGE))


@app.get("/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=__version__,
        services={
            "dynamodb": settings.dynamodb.table_name or "not_configured",
        },
    )


@app.get("/items")
def list_items(service: ItemTableService = Depends(get_item_service)):
    """List every item in the table."""
    return service.list_items()


@app.post("/items", status_code=status.HTTP_201_CREATED)
def create_item(
    payload: dict[str, Any] | None = Body(default=None),
    service: ItemTableService = Depends(get_item_service),
):
    """
    Create an item.

    A new id is generated; any id in the body is ignored.
    """
    return service.create_item(_require_body(payload))


@app.get("/items/{item_id}")
def get_item(item_id: str, service: ItemTableService = Depends(get_item_service)):
    """Get an item by id."""
    item = service.get_item(item_id)
    if item is None:
        raise ItemNotFound(item_id)
    return item


@app.patch("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_item(
    item_id: str,
    payload: dict[str, Any] | None = Body(default=None),
    service: ItemTableService = Depends(get_item_service),
):
    """
    Partially update an item.

    Only the fields present in the body change.
    """
    service.update_item(item_id, _require_body(payload))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/items/{item_id}")
def delete_item(item_id: str, service: ItemTableService = Depends(get_item_service)):
    """Delete an item. Succeeds whether or not the item existed."""
    service.delete_item(item_id)
    return Response(status_code=status.HTTP_200_OK)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    return app
