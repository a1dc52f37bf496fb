"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from worktime import __version__
from worktime.api.v1.api import api_router
from worktime.config import settings
from worktime.constants.errors import ErrorCode, explain_error
from worktime.services.kiosk import KioskRegistry
from worktime.services.session_engine import UserLockRegistry

# Custom TRACE level
logging.TRACE = 5
logging.addLevelName(logging.TRACE, "TRACE")


# Add trace method to standard Logger class for all instances
def trace_method(self, msg, *args, **kwargs):
    if self.isEnabledFor(logging.TRACE):
        self._log(logging.TRACE, msg, args, **kwargs)


logging.Logger.trace = trace_method

# Configure root logger early
log_level_str = settings.log_level.upper()
log_level = logging.TRACE if log_level_str == "TRACE" else getattr(logging, log_level_str, logging.INFO)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)-8s - %(message)s'
    )

    root = logging.getLogger()
    root.setLevel(log_level)

    # SQL echo and scheduler chatter only at TRACE
    sqlalchemy_level = logging.INFO if log_level_str == "TRACE" else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sqlalchemy_level)
    logging.getLogger("apscheduler").setLevel(logging.DEBUG if log_level_str == "TRACE" else logging.WARNING)
    logging.getLogger("worktime.services").setLevel(log_level)

    root.trace("Trace logging enabled at startup (verbose details).") if log_level_str == "TRACE" else root.debug("Debug logging enabled at startup.")

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from worktime.database import SessionLocal, init_db
    from worktime.scheduler import shutdown_scheduler, start_scheduler
    from worktime.services.bootstrap import ensure_admin, seed_demo_data

    init_db()
    db = SessionLocal()
    try:
        ensure_admin(db)
        if settings.seed_demo_data:
            seed_demo_data(db)
    finally:
        db.close()

    if settings.scheduler_enabled:
        start_scheduler()
    log.info(f"Work time tracker {__version__} started")
    yield
    shutdown_scheduler()


app = FastAPI(
    title="Work Time Tracker",
    description="Work session tracking with QR kiosks and per-project evaluation",
    version=__version__,
    lifespan=lifespan,
)

# Process-wide registries shared by every request
app.state.user_locks = UserLockRegistry()
app.state.kiosks = KioskRegistry()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__
    }


@app.get("/")
async def root():
    """Root endpoint - redirect to docs."""
    return {
        "message": "Work Time Tracker API",
        "version": __version__,
        "docs": "/docs"
    }


app.include_router(api_router, prefix=settings.api_v1_str)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    summary = f"{'.'.join(str(p) for p in first.get('loc', []))}: {first.get('msg', '')}"
    log.debug(f"Rejected request to {request.url.path}: {summary}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": explain_error(ErrorCode.VALIDATION_ERROR, {"detail": summary}),
                "errors": errors,
            }
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
