"""
FastAPI application for Campus Service
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from .api import (
    feed_router,
    graph_router,
    groups_router,
    messages_router,
    users_router,
)
from .config import settings
from .database import db
from .dependencies import set_repositories
from .errors import CampusError
from .infrastructure import memory_repositories, postgres_repositories
from .kafka_producer import kafka_producer
from .seed import seed

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Starting Campus Service...")

    if settings.STORAGE_BACKEND == "memory":
        repositories = memory_repositories()
        logger.info("Using in-memory storage")
    else:
        await db.connect()
        await db.init_schema()
        repositories = postgres_repositories(db)
        logger.info("Database connected")

    set_repositories(repositories)

    if settings.SEED_ON_STARTUP:
        await seed(repositories)

    await kafka_producer.start()

    logger.info(f"Campus Service started successfully on port {settings.PORT}")

    yield

    # Shutdown
    logger.info("Shutting down Campus Service...")

    await kafka_producer.stop()
    set_repositories(None)

    if settings.STORAGE_BACKEND != "memory":
        await db.disconnect()

    logger.info("Campus Service shut down successfully")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Campus social network - feed visibility, follows, groups and messages",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.exception_handler(CampusError)
async def campus_error_handler(request: Request, exc: CampusError):
    """Render domain and store errors"""
    if exc.http_status >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Render malformed request bodies as 400"""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                    }
                    for e in exc.errors()
                ],
            }
        },
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


app.include_router(feed_router)
app.include_router(groups_router)
app.include_router(graph_router)
app.include_router(messages_router)
app.include_router(users_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "campus_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
