import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mediecho.background_jobs import scheduler
from mediecho.config import get_settings
from mediecho.database import init_db, DATABASE_URL
from mediecho.errors import ServiceError
from mediecho.routes import (
    auth_router,
    logs_router,
    briefs_router,
    subscription_router,
    webhooks_router,
)
from mediecho.timeutils import utc_now

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title="MediEcho",
    description="Privacy-first health journal API",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.app_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/api")
app.include_router(logs_router, prefix="/api")
app.include_router(briefs_router, prefix="/api")
app.include_router(subscription_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")


@app.on_event("startup")
def on_startup():
    """Ensure DB is reachable and initialized at startup. Will create tables
    automatically when using the default SQLite dev DB. If initialization
    fails the app will raise and stop with a clear error message.
    """
    try:
        init_db()
    except Exception as e:
        # Re-raise as RuntimeError so the server fails loudly
        raise RuntimeError(
            f"Database initialization failed for DATABASE_URL={DATABASE_URL}: {e}"
        ) from e

    os.makedirs(settings.briefs_dir, exist_ok=True)
    scheduler.start()


@app.on_event("shutdown")
def on_shutdown():
    scheduler.stop()


# Error handlers
def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    body = {"success": False, "message": message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return error_response(400, "Validation failed", details=details)


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    # same Settings the routes receive, honouring dependency overrides
    resolve_settings = request.app.dependency_overrides.get(get_settings, get_settings)
    if resolve_settings().is_production:
        message = "Server Error"
    else:
        message = str(exc) or "Server Error"
    return error_response(500, message)


@app.get("/health")
def health():
    return {
        "status": "OK",
        "timestamp": utc_now(),
        "environment": settings.environment,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mediecho.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
