"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from portal.core.config import settings
from portal.core.middleware import setup_middleware
from portal.core.rate_limiter import limiter
from portal.core.exceptions import AuthorizationError, PortalError, ValidationError

from portal.api.auth import router as auth_router
from portal.api.dashboard import router as dashboard_router
from portal.api.news import router as news_router
from portal.api.trash import router as trash_router
from portal.api.bids_awards import router as bids_awards_router
from portal.api.full_disclosure import router as full_disclosure_router
from portal.api.tourism import router as tourism_router
from portal.api.awards_recognition import router as awards_recognition_router
from portal.api.sangguniang_bayan import router as sangguniang_bayan_router
from portal.api.ordinance_resolutions import router as ordinance_resolutions_router
from portal.api.users import router as users_router
from portal.api.activity_logs import router as activity_logs_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("municipal_portal")

FLASH_COOKIE = "flash_error"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting %s", settings.APP_NAME)
    if settings.STORAGE_BACKEND == "minio":
        from portal.services.storage_service import storage_service
        try:
            storage_service.backend.ensure_bucket()
            logger.info("MinIO bucket %s ready", settings.MINIO_BUCKET)
        except Exception as e:
            logger.warning("MinIO not available: %s", e)

    yield

    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Municipal government content management",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware
setup_middleware(app)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def is_interactive(request: Request) -> bool:
    """True for browser navigation, as opposed to API and XHR calls."""
    if request.headers.get("X-Requested-With", "").lower() == "xmlhttprequest":
        return False
    return "text/html" in request.headers.get("Accept", "")


@app.exception_handler(AuthorizationError)
async def authorization_exception_handler(request: Request, exc: AuthorizationError):
    logger.info("Denied %s %s: %s", request.method, request.url.path, exc.message)
    if is_interactive(request):
        response = RedirectResponse(request.headers.get("Referer") or "/", status_code=303)
        response.set_cookie(FLASH_COOKIE, exc.message, max_age=60, httponly=True, samesite="lax")
        return response
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder({"detail": exc.message, "errors": exc.errors, "input": exc.input}),
    )


@app.exception_handler(PortalError)
async def portal_exception_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Register routers
app.include_router(auth_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(news_router, prefix="/api")
app.include_router(trash_router, prefix="/api")
app.include_router(bids_awards_router, prefix="/api")
app.include_router(full_disclosure_router, prefix="/api")
app.include_router(tourism_router, prefix="/api")
app.include_router(awards_recognition_router, prefix="/api")
app.include_router(sangguniang_bayan_router, prefix="/api")
app.include_router(ordinance_resolutions_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(activity_logs_router, prefix="/api")

# Public files on the local disk
if settings.STORAGE_BACKEND == "local":
    app.mount(
        settings.STORAGE_URL,
        StaticFiles(directory=settings.STORAGE_ROOT, check_dir=False),
        name="storage",
    )


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/api/health")
@limiter.exempt
async def health():
    """Quick health check endpoint."""
    return {"status": "ok"}
