"""
Main FastAPI application factory and startup configuration
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from src.core.config import APP_CONFIG
from src.database.db_manager import DBManager
from src.exceptions import BookWormError
from src.utils.logger import LOG_FORMAT, setup_logger

from src.api.health_routes import router as health_router
from src.api.user_routes import router as user_router
from src.api.book_routes import router as book_router
from src.api.genre_routes import router as genre_router
from src.api.tutorial_routes import router as tutorial_router
from src.api.review_routes import router as review_router
from src.api.shelf_routes import router as shelf_router
from src.api.stats_routes import router as stats_router

# Module loggers (logging.getLogger(__name__)) go through the root handler
logging.basicConfig(
    level=getattr(logging, APP_CONFIG["log_level"].upper(), logging.INFO),
    format=LOG_FORMAT,
)
logger = setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    ✅ STARTUP/SHUTDOWN: Application lifecycle management
    """
    # ===== STARTUP =====
    logger.info("🚀 Starting BookWorm API...")
    logger.info(f"   Environment: {APP_CONFIG['env']}")
    logger.info(f"   Host: {APP_CONFIG['host']}")
    logger.info(f"   Port: {APP_CONFIG['port']}")

    # A db_manager set before startup (tests) is used as-is
    owns_db = getattr(app.state, "db_manager", None) is None
    if owns_db:
        db_manager = DBManager()
        try:
            db_manager.connect()
            db_manager.create_indexes()
        except BookWormError as e:
            logger.error(f"❌ Startup error: {e.message}")
            db_manager.close()
            raise
        app.state.db_manager = db_manager

    logger.info("✅ Application startup completed")

    yield

    # ===== SHUTDOWN =====
    logger.info("🛑 Shutting down BookWorm API...")
    if owns_db:
        app.state.db_manager.close()
        app.state.db_manager = None
    logger.info("✅ Shutdown completed")


def create_app() -> FastAPI:
    """
    ✅ FastAPI application factory
    """
    app = FastAPI(
        title="BookWorm API",
        description="Book tracking: catalogue, reading shelves, reviews and reading goals",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if APP_CONFIG["debug"] else None,
        redoc_url="/redoc" if APP_CONFIG["debug"] else None,
    )
    app.state.db_manager = None

    # ===== ERROR HANDLERS =====

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Log validation errors with full details"""
        logger.error(f"❌ VALIDATION ERROR (422) {request.method} {request.url.path}")
        for i, error in enumerate(exc.errors(), 1):
            logger.error(
                f"   {i}. Location: {error.get('loc', 'unknown')} "
                f"Message: {error.get('msg', 'unknown')}"
            )
        return JSONResponse(status_code=422, content={"detail": exc.errors()})

    @app.exception_handler(BookWormError)
    async def bookworm_error_handler(request: Request, exc: BookWormError):
        """
        Domain errors carry their own status:
        NOT_FOUND 404, INVALID_INPUT 400, CONFLICT 409, UPSTREAM_FAILURE 503
        """
        if exc.status_code >= 500:
            logger.error(f"❌ {exc.error_code} on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"⚠️ {exc.error_code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # ===== CORS =====
    app.add_middleware(
        CORSMiddleware,
        allow_origins=APP_CONFIG["cors_origins"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ===== ROUTERS =====
    app.include_router(health_router, tags=["Health"])
    app.include_router(user_router)
    app.include_router(book_router)
    app.include_router(review_router)
    app.include_router(shelf_router)
    app.include_router(genre_router)
    app.include_router(tutorial_router)
    app.include_router(stats_router)

    return app


# Create the FastAPI application instance
app = create_app()
