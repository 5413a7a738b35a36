"""
Main FastAPI application
EduPal study service: AI study materials, quiz scores, downloads and subscriptions
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time

from edupal.config import settings
from edupal.database import init_db
from edupal.api import study, resources, subscriptions
from edupal.exceptions import EduPalError
from edupal.services.gemini_service import GeminiService
from edupal.services.paystack_service import PaystackClient
from edupal.services.storage_service import SupabaseStorage
from edupal.utils.cache import ArtifactCache

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="EduPal backend: AI flashcards and quizzes from library resources, scores, downloads and subscriptions",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_clients(app: FastAPI) -> None:
    """Construct external clients once; handlers receive them through dependencies"""
    if settings.GEMINI_API_KEY:
        app.state.generator = GeminiService(
            api_key=settings.GEMINI_API_KEY,
            model_name=settings.GEMINI_MODEL,
            temperature=settings.GEMINI_TEMPERATURE
        )
    else:
        logger.warning("GEMINI_API_KEY not set. Study material generation disabled.")
        app.state.generator = None

    if settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY:
        app.state.storage = SupabaseStorage.from_credentials(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY,
            bucket=settings.STORAGE_BUCKET
        )
    else:
        logger.warning("Supabase credentials not set. Storage and auth disabled.")
        app.state.storage = None

    app.state.artifact_cache = ArtifactCache.from_url(settings.REDIS_URL, ttl=settings.ARTIFACT_CACHE_TTL)

    if not settings.PAYSTACK_SECRET_KEY:
        logger.warning("PAYSTACK_SECRET_KEY not set. Payments disabled and webhooks rejected.")

    app.state.paystack = PaystackClient(
        secret_key=settings.PAYSTACK_SECRET_KEY,
        base_url=settings.PAYSTACK_BASE_URL,
        timeout=settings.PAYSTACK_TIMEOUT
    )


build_clients(app)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing"""

    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration:.3f}s"
    )

    return response


# Domain errors carry their own status
@app.exception_handler(EduPalError)
async def edupal_exception_handler(request: Request, exc: EduPalError):
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "status_code": exc.status_code
        }
    )


# Malformed bodies are a 400 for this API, not FastAPI's default 422
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "invalid_request",
            "message": "Invalid request payload",
            "status_code": 400,
            "details": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
                for err in exc.errors()
            ]
        }
    )


# HTTP exception handler
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Format HTTP exceptions consistently"""

    content = {
        "error": "http_error",
        "message": exc.detail,
        "status_code": exc.status_code
    }
    # Structured details (e.g. rate limits) supply their own error and extra fields
    if isinstance(exc.detail, dict):
        content.update(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None)
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors gracefully"""

    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "detail": str(exc) if settings.DEBUG else None
        }
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring

    Returns service status and which integrations are configured
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "generation_enabled": app.state.generator is not None,
        "storage_enabled": app.state.storage is not None,
        "cache_enabled": app.state.artifact_cache.enabled,
        "timestamp": time.time()
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "EduPal Study Service API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


# Include routers
app.include_router(study.router)
app.include_router(resources.router)
app.include_router(subscriptions.router)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    logger.info("Application startup complete")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down application")
    app.state.paystack.http.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "edupal.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
