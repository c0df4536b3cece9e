"""
Marketplace Chat Application Entry Point.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from marketplace.chat.connection_manager import ConnectionRegistry
from marketplace.chat.push import PushChannel
from marketplace.chat.service import ChatService
from marketplace.core.config import settings
from marketplace.core.database import SessionLocal, engine
from marketplace.core.middleware import SessionMiddleware
from marketplace.router.endpoints import api_router, push_router
import logging
import uvicorn

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting application...")

    from marketplace.session import init_redis, close_redis
    try:
        init_redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
        )
    except Exception as e:
        logger.error(f"Redis initialization failed: {e}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection OK")

        # Auto-create tables in debug mode (use Alembic migrations in production)
        if settings.DEBUG:
            from marketplace.core.database import Base
            from marketplace.model import User, Product, ChatRoom, ChatMessage, Block  # noqa: F401
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created (DEBUG mode)")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")

    registry = ConnectionRegistry()
    chat_service = ChatService(SessionLocal)
    app.state.registry = registry
    app.state.chat_service = chat_service
    app.state.push_channel = PushChannel(
        chat_service,
        registry,
        require_session=settings.WS_REQUIRE_SESSION,
    )

    yield

    logger.info("Shutting down...")
    await registry.close_all()
    close_redis()
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query params are client errors (400)."""
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body") or "request"
    return JSONResponse(
        status_code=400,
        content={"detail": {"code": "VALIDATION_ERROR", "message": f"{field}: {first.get('msg', 'invalid')}"}},
    )


# Session middleware
app.add_middleware(SessionMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(api_router)
app.include_router(push_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"message": "Welcome to the Marketplace Chat API!"}


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
