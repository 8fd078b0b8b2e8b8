"""FastAPI application entry point"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from vidtube.core.errors import register_exception_handlers
from vidtube.core.logging import setup_logging
from vidtube.core.middleware import security_middleware, setup_cors_middleware
from vidtube.core.otel import initialize_otel, instrument_fastapi, instrument_sqlalchemy
from vidtube.db.redis import close_redis_client, get_redis_client
from vidtube.db.session import close_db, engine, init_db
from vidtube.models import Base  # noqa: F401 - registers all models with Base.metadata

# Import routers
from vidtube.api import comments, dashboard, likes, monitoring, playlists, subscriptions, tweets, users, videos

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    # Startup
    if not initialize_otel():
        logger.info("OpenTelemetry not configured - running without distributed tracing")

    logger.info("Initializing database...")
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    logger.info("Testing Redis connection...")
    try:
        get_redis_client().ping()
        logger.info("Redis connection successful")
    except Exception as e:
        # Rate limiting fails open, so the API can still serve without Redis
        logger.warning(f"Redis connection failed, rate limiting disabled until it recovers: {e}")

    instrument_sqlalchemy(engine)

    yield

    # Shutdown
    logger.info("Shutting down...")
    close_redis_client()
    close_db()


# Create FastAPI app
app = FastAPI(
    title="VidTube Backend",
    description="Video sharing platform API",
    version="1.0.0",
    lifespan=lifespan
)

# Instrument FastAPI with OpenTelemetry
instrument_fastapi(app)

setup_cors_middleware(app)
app.middleware("http")(security_middleware)
register_exception_handlers(app)

# Include routers
app.include_router(monitoring.router)
app.include_router(users.router)
app.include_router(videos.router)
app.include_router(comments.router)
app.include_router(likes.router)
app.include_router(subscriptions.router)
app.include_router(playlists.router)
app.include_router(tweets.router)
app.include_router(dashboard.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
