"""
FastAPI Web Application - Business Directory API
=================================================

Routes:
    POST /business                 create an online or physical business
    GET  /business/{id}            fetch a business with its review figures
    POST /business/{id}/reviews    add a review to a business

Request bodies are validated here with pydantic; business rules live in
BusinessOperations. Every failure becomes a JSON ``{"detail": ...}`` body:
400 for bad input, 404 for unknown businesses and routes, 500 for storage
and unexpected errors (details only go to the log).
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional, TypeVar

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..domain.errors import DirectoryError, InvalidInputError, StorageError
from ..domain.models import CreateBusinessRequest, CreateReviewInput
from ..domain.operations import BusinessOperations
from ..infrastructure.persistence import BusinessRepository, InMemoryRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

_create_business_body = TypeAdapter(CreateBusinessRequest)
_create_review_body = TypeAdapter(CreateReviewInput)


# ── Request helpers ────────────────────────────────────────────────

def get_operations(request: Request) -> BusinessOperations:
    return request.app.state.operations


def describe_validation_error(err: ValidationError) -> str:
    """Turn the first pydantic error into a one-line message."""
    first = err.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"Invalid request body: {location}: {first['msg']}"
    return f"Invalid request body: {first['msg']}"


async def parse_body(request: Request, adapter: TypeAdapter[T]) -> T:
    raw = await request.body()
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        raise InvalidInputError(describe_validation_error(e))


# ── Routes ─────────────────────────────────────────────────────────

router = APIRouter()


@router.post("/business", status_code=201)
async def create_business(request: Request, ops: BusinessOperations = Depends(get_operations)):
    body = await parse_body(request, _create_business_body)
    business = await ops.create_business(body)
    return business.model_dump(mode="json")


@router.get("/business")
async def get_business_without_id():
    raise InvalidInputError("Missing business id")


@router.get("/business/{business_id}")
async def get_business(business_id: str, ops: BusinessOperations = Depends(get_operations)):
    business = await ops.get_business(business_id)
    return business.model_dump(mode="json")


@router.post("/business//reviews")
async def create_review_without_id():
    raise InvalidInputError("Missing business id")


@router.post("/business/{business_id}/reviews", status_code=201)
async def create_review(
    business_id: str,
    request: Request,
    ops: BusinessOperations = Depends(get_operations),
):
    body = await parse_body(request, _create_review_body)
    review = await ops.create_review(business_id, body)
    return review.model_dump(mode="json")


# ── Error handlers ─────────────────────────────────────────────────

async def handle_directory_error(request: Request, exc: DirectoryError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc.cause!r}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={"detail": f"No route for {request.method} {request.url.path}"},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ── App factory ────────────────────────────────────────────────────

def create_app(repository: Optional[BusinessRepository] = None) -> FastAPI:
    """
    Build the API around a repository.

    The repository is opened on startup and closed on shutdown. Defaults to a
    fresh InMemoryRepository, so every app instance has its own state.
    """
    if repository is None:
        repository = InMemoryRepository()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await repository.open()
        logger.info(f"Repository ready: {type(repository).__name__}")
        yield
        await repository.close()
        logger.info("Repository closed")

    app = FastAPI(
        title="Business Directory",
        description="Businesses and their customer reviews",
        lifespan=lifespan,
    )
    app.state.operations = BusinessOperations(repository)

    app.include_router(router)
    app.add_exception_handler(DirectoryError, handle_directory_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    return app
