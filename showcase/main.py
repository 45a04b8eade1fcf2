import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.api import router as api_router
from showcase.auth.sessions import session_store
from showcase.config import get_settings
from showcase.database import Base, engine, get_db
from showcase.exceptions import (
    AuthenticationRequired,
    AuthorizationError,
    ProjectValidationError,
    StoreUnavailable,
)
from showcase.schemas import HealthResponse

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    await session_store.connect()
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)

    # Create tables (development only)
    if settings.DEBUG:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    logger.info(f"{settings.APP_NAME} started")
    yield

    # Shutdown
    await session_store.disconnect()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Community project showcase: catalog, likes and admin tools",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
def _error_response(status_code: int, detail: str, error: str, headers=None, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error": error, **extra},
        headers=headers
    )


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    return _error_response(exc.status_code, exc.detail, "permission_denied")


@app.exception_handler(AuthenticationRequired)
async def auth_required_handler(request: Request, exc: AuthenticationRequired):
    return _error_response(exc.status_code, exc.detail, "authentication_required", headers=exc.headers)


@app.exception_handler(ProjectValidationError)
async def validation_error_handler(request: Request, exc: ProjectValidationError):
    return _error_response(exc.status_code, exc.detail, "validation_error", errors=exc.errors)


@app.exception_handler(SQLAlchemyError)
@app.exception_handler(RedisError)
async def store_unavailable_handler(request: Request, exc: Exception):
    # Details stay in the server log
    logger.exception(f"Store failure on {request.method} {request.url.path}", exc_info=exc)
    unavailable = StoreUnavailable()
    return _error_response(unavailable.status_code, unavailable.detail, "store_unavailable")


# Include routers
app.include_router(api_router)

# Uploaded files
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads"
)


@app.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint"""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        db_status = "unhealthy"

    return HealthResponse(
        status="ok" if db_status == "healthy" else "degraded",
        database=db_status,
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs"
    }
