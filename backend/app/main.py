"""promptlib Backend API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from promptlib.errors import ImportSourceError, NotFoundError, StorageError, ValidationError

from .config import get_settings
from .logging_config import configure_logging, get_logger
from .models import HealthResponse
from .rate_limit import limiter
from .routes import (
    exports_router,
    favorites_router,
    imports_router,
    projects_router,
    prompts_router,
    taxonomy_router,
)

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging()
    logger.info(f"Starting promptlib API (debug={settings.debug})")
    yield
    logger.info("Shutting down promptlib API")


app = FastAPI(
    title="promptlib API",
    description="Prompt library backend for the web client and browser extension",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(prompts_router)
app.include_router(taxonomy_router)
app.include_router(favorites_router)
app.include_router(projects_router)
app.include_router(imports_router)
app.include_router(exports_router)


# Library errors -> HTTP
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(ImportSourceError)
async def import_source_error_handler(request: Request, exc: ImportSourceError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Database request failed"},
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": "promptlib-backend",
        "version": "0.1.0",
        "status": "ok",
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Detailed health check with actual database verification."""
    from .database import get_supabase_client

    try:
        db = get_supabase_client()
        db.table("categories").select("id").limit(1).execute()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)[:50]}"

    return HealthResponse(
        status="healthy" if db_status == "connected" else "degraded",
        database=db_status,
    )
