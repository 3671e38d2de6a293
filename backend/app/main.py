import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.v1 import api_router
from app.core.config import settings
from app.core.errors import ErrorKind
from app.core.logging_config import RequestLoggingMiddleware, setup_logging
from app.core.middleware import RequestSizeLimitMiddleware
from app.db.session import check_db_connection, engine, init_db
from app.schemas.envelope import Envelope

# JSON in production, colored in development
setup_logging()
logger = logging.getLogger("employee_api")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Security headers on every response. Nothing is cacheable."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        return response


class ErrorEnvelope(Envelope):
    """Body for failures that escape every operation boundary."""
    reference: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
    database: bool


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} {settings.full_version} ({settings.ENVIRONMENT})")
    try:
        await init_db()
    except Exception as e:
        # Keep serving so /health can report the outage
        logger.error(f"Database initialization failed: {e}")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Authenticated employee records behind a single operation endpoint",
    version=settings.VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler. Answers in the same envelope shape as the operations;
    the exception detail is only included outside production.
    """
    # Set on the scope by RequestLoggingMiddleware, which has already returned here
    reference = getattr(request.state, "request_id", None)
    if not reference:
        reference = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    logger.error(f"Unhandled exception [{reference}] {request.method} {request.url.path}", exc_info=exc)

    body = ErrorEnvelope(
        success=False,
        message=ErrorKind.UPSTREAM.display,
        reference=reference,
        detail=None if settings.is_production else f"{type(exc).__name__}: {exc}",
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.to_response(),
        headers={"X-Request-ID": reference},
    )


# Origins must be explicit because credentials are allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE_MB * 1024 * 1024)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Database connectivity; 503 while the database is unreachable."""
    db_ok = await check_db_connection()
    health = HealthResponse(
        status="ok" if db_ok else "degraded",
        version=settings.full_version,
        environment=settings.ENVIRONMENT,
        database=db_ok,
    )
    if not db_ok:
        logger.warning("Health check: database unreachable")
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health.model_dump())
    return health


@app.get("/")
async def root():
    return {
        "message": f"{settings.PROJECT_NAME} is running",
        "operations": f"{settings.API_V1_STR}/operations",
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn on settings.PORT."""
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
