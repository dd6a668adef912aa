"""
Collab Milestones service entry point.

Builds the FastAPI app: routers, CORS and the error-to-status mapping.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from collab.core.config import get_settings
from collab.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CollabError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from collab.core.logger import setup_logger

logger = setup_logger(__name__)

VERSION = "0.1.0"

# Resolved along the exception MRO, so CollabError only catches what is left.
ERROR_STATUS: list[tuple[type[CollabError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (CollabError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Collab Milestones starting (environment=%s)", settings.ENVIRONMENT)
    if settings.ENVIRONMENT == "local":
        from collab.infrastructure.local.database import init_db

        await init_db()
    yield
    logger.info("Collab Milestones stopped")


def error_body(exc: CollabError) -> dict:
    """``{detail, field?, currentStatus?}``"""
    body = {"detail": exc.message}
    if getattr(exc, "field", None):
        body["field"] = exc.field
    if getattr(exc, "current_status", None):
        body["currentStatus"] = exc.current_status
    return body


def register_exception_handlers(app: FastAPI) -> None:
    for exc_type, status_code in ERROR_STATUS:

        async def handler(request: Request, exc: CollabError, status_code: int = status_code):
            if status_code >= 500:
                logger.error("Unhandled service error on %s: %s", request.url.path, exc.message)
            return JSONResponse(status_code=status_code, content=error_body(exc))

        app.add_exception_handler(exc_type, handler)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Collab Milestones",
        description="Milestone negotiation, lifecycle and reputation",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    register_exception_handlers(app)

    from collab.api import chat, milestones, notifications, proposals, reputation

    for module, prefix in (
        (proposals, "/api/proposals"),
        (milestones, "/api/milestones"),
        (reputation, "/api"),
        (notifications, "/api/notifications"),
        (chat, "/api/chat"),
    ):
        app.include_router(module.router, prefix=prefix, tags=[module.__name__.rsplit(".", 1)[-1]])

    @app.get("/health")
    async def health():
        return {"status": "healthy", "environment": settings.ENVIRONMENT, "version": VERSION}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_settings()
    uvicorn.run("main:app", host=config.HOST, port=config.PORT, reload=config.DEBUG)
