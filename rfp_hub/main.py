from fastapi import FastAPI, Depends, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rfp_hub.config import DEV_JWT_SECRET, settings
from rfp_hub.database import init_db, close_db, get_db
from rfp_hub.logging_config import setup_logging
from rfp_hub.middleware.correlation import CorrelationIdMiddleware

# Import models so they are registered with Base.metadata
import rfp_hub.models  # noqa: F401

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("starting_rfp_hub", env=settings.ENVIRONMENT, version=settings.APP_VERSION)
    if settings.is_production and settings.JWT_SECRET == DEV_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set in production")
    await init_db()
    yield
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Global exception handlers. Every error uses the response envelope:
# {"success": false, "message": "...", "error": "..."}
# ---------------------------------------------------------------------------

def _error_response(status_code: int, message: str, error=None, headers=None) -> JSONResponse:
    content = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return _error_response(exc.status_code, "Route not found")
    return _error_response(
        exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return _error_response(status.HTTP_400_BAD_REQUEST, "Validation error", "; ".join(problems))


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("integrity_violation", path=request.url.path, error=str(exc.orig))
    return _error_response(
        status.HTTP_409_CONFLICT, "A record with this information already exists"
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", path=request.url.path, exc_info=exc)
    message = str(exc) if settings.is_development else "Internal server error"
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With", "X-Request-ID"],
)


@app.get("/health", tags=["System"])
async def health(response: Response, db: AsyncSession = Depends(get_db)):
    health_status = {"status": "healthy", "version": settings.APP_VERSION, "checks": {}}

    try:
        await db.execute(text("SELECT 1"))
        health_status["checks"]["db"] = "ok"
    except Exception as e:
        logger.error("health_check_db_failed", error=str(e))
        health_status["checks"]["db"] = "error"
        health_status["status"] = "unhealthy"

    if health_status["status"] == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return health_status


# --- Routers ---
from rfp_hub.routes.auth import router as auth_router  # noqa: E402
from rfp_hub.routes.projects import router as projects_router  # noqa: E402
from rfp_hub.routes.products import router as products_router  # noqa: E402
from rfp_hub.routes.rfps import router as rfps_router, public_router as public_rfps_router  # noqa: E402
from rfp_hub.routes.proposals import router as proposals_router  # noqa: E402
from rfp_hub.routes.dashboard import router as dashboard_router  # noqa: E402

app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(projects_router, prefix="/api/projects", tags=["Projects"])
app.include_router(
    products_router, prefix="/api/projects/{project_id}/products", tags=["Products"]
)
app.include_router(rfps_router, prefix="/api/projects/{project_id}/rfps", tags=["RFPs"])
app.include_router(public_rfps_router, prefix="/api/rfps", tags=["RFPs"])
app.include_router(proposals_router, prefix="/api/proposals", tags=["Proposals"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])
