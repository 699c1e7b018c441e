"""FastAPI application entry point."""
import os

# Force UTC before anything caches timezone information
os.environ['TZ'] = 'UTC'

import time

if hasattr(time, "tzset"):
    time.tzset()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from contextlib import asynccontextmanager

from ladders.config import get_settings
from ladders.version import APP_VERSION
from ladders.routers import admin, health, player
from ladders.utils import LockTimeoutError, lock_client
from ladders.utils.exceptions import (
    AlreadyCompletedError,
    GameError,
    IncorrectCurrentPasswordError,
    InvalidCredentialsError,
    InvalidInputError,
    NoGrantHistoryError,
    NoRollsRemainingError,
    PlayerNotFoundError,
)

settings = get_settings()

# Create logs directory if it doesn't exist
logs_dir = Path(settings.log_dir)
logs_dir.mkdir(parents=True, exist_ok=True)

log_file = logs_dir / "ladders.log"
sql_log_file = logs_dir / "ladders_sql.log"
api_log_file = logs_dir / "ladders_api.log"

# General logs: 1MB max size, keep 5 backups
rotating_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

sql_rotating_handler = RotatingFileHandler(sql_log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
sql_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

# API request logs: 2MB max size, keep 15 backups
api_rotating_handler = RotatingFileHandler(api_log_file, maxBytes=2 * 1024 * 1024, backupCount=15, encoding='utf-8')
api_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

# force=True overrides any configuration uvicorn already installed
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        rotating_handler,
    ],
    force=True,
)

logger = logging.getLogger(__name__)

api_logger = logging.getLogger("ladders.api")
api_logger.handlers.clear()
api_logger.addHandler(api_rotating_handler)
api_logger.setLevel(logging.INFO)
api_logger.propagate = False

uvicorn_access_logger = logging.getLogger("uvicorn.access")
uvicorn_access_logger.setLevel(logging.INFO)
if rotating_handler not in uvicorn_access_logger.handlers:
    uvicorn_access_logger.addHandler(rotating_handler)

sqlalchemy_logger = logging.getLogger("sqlalchemy.engine.Engine")
sqlalchemy_logger.handlers.clear()
sqlalchemy_logger.addHandler(sql_rotating_handler)
sqlalchemy_logger.setLevel(logging.INFO)
sqlalchemy_logger.propagate = False


class SQLTransactionFilter(logging.Filter):
    def filter(self, record):
        if record.levelno == logging.INFO and hasattr(record, 'getMessage'):
            message = record.getMessage()

            # Transaction markers and timing lines are noise
            if any(keyword in message for keyword in ['ROLLBACK', 'BEGIN', 'COMMIT', 'generated in']):
                return False

            # One statement per line
            if any(kw in message for kw in ['SELECT', 'DELETE', 'INSERT', 'UPDATE']):
                record.msg = ' '.join(message.split())
                record.args = ()

        return True


sqlalchemy_logger.addFilter(SQLTransactionFilter())

ERROR_STATUS_CODES: dict[type[GameError], int] = {
    InvalidInputError: 400,
    PlayerNotFoundError: 404,
    AlreadyCompletedError: 409,
    NoRollsRemainingError: 409,
    NoGrantHistoryError: 409,
    InvalidCredentialsError: 401,
    IncorrectCurrentPasswordError: 401,
}


def status_code_for(exc: GameError) -> int:
    """HTTP status for a game error; subclasses inherit their parent's status."""
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return 400


async def bootstrap_admin_credential():
    """Make sure the admin credential row exists before the first admin request."""
    from ladders.database import AsyncSessionLocal
    from ladders.services.admin_auth_service import AdminAuthService

    try:
        async with AsyncSessionLocal() as db:
            await AdminAuthService(db).ensure_credential()
    except Exception as e:
        logger.error(f"Failed to bootstrap admin credential: {e}")
        raise


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Manage application startup and shutdown tasks."""
    logger.info("=" * 60)
    logger.info("Snakes & Ladders Promo API Starting")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'SQLite'}")
    logger.info(f"Locks: {lock_client.backend}")
    logger.info(f"Reward policy: {settings.reward_policy}, guaranteed finish: {settings.guaranteed_finish}")
    logger.info("=" * 60)

    await bootstrap_admin_credential()

    try:
        yield
    finally:
        logger.info("Snakes & Ladders Promo API Shutting Down... Goodbye!")


app = FastAPI(
    title="Snakes & Ladders Promo API",
    description="Area-scoped snakes and ladders promotion with capped rewards",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with user-friendly messages."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        loc = error.get("loc", [])
        msg = error.get("msg", "Validation error")
        error_type = error.get("type", "unknown")

        field_path = " -> ".join(str(x) for x in loc[1:]) if len(loc) > 1 else "unknown field"
        errors.append({
            "field": field_path,
            "message": msg,
            "type": error_type
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": errors
        }
    )


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    """Map typed game errors to their HTTP status and code tag."""
    status_code = status_code_for(exc)
    log = logger.warning if status_code in (401, 409) else logger.info
    log(f"{exc.code} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": exc.code, "message": str(exc)})


@app.exception_handler(LockTimeoutError)
async def lock_timeout_handler(request: Request, exc: LockTimeoutError):
    logger.error(f"Lock timeout on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "busy", "message": "Area is busy, please try again."},
        headers={"Retry-After": "1"},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every API request and response to the dedicated API log with timing,
    status code and client details.
    """
    start_time = time.time()

    client_ip = request.client.host if request.client else "unknown"
    user_agent = request.headers.get("user-agent", "unknown")

    method = request.method
    path = request.url.path
    query_params = str(request.query_params) if request.query_params else ""

    request_id = f"{method}:{path}:{int(start_time * 1000) % 100000}"

    api_logger.info(f">> {request_id} | START | {method} {path} | IP: {client_ip} | UA: {user_agent[:50]}...")

    if query_params:
        api_logger.info(f">> {request_id} | QUERY | {query_params}")

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        api_logger.info(
            f"<< {request_id} | COMPLETE | {method} {path} | "
            f"Status: {response.status_code} | "
            f"Time: {process_time:.3f}s | "
            f"IP: {client_ip}"
        )

        if response.status_code >= 400:
            content_type = response.headers.get("content-type", "unknown")
            api_logger.warning(f"<< {request_id} | ERROR_RESPONSE | Content-Type: {content_type}")

        return response

    except Exception as e:
        process_time = time.time() - start_time
        api_logger.error(
            f"<< {request_id} | EXCEPTION | {method} {path} | "
            f"Error: {str(e)[:100]} | "
            f"Time: {process_time:.3f}s | "
            f"IP: {client_ip}"
        )
        raise


allowed_origins = os.getenv("ALLOWED_ORIGINS", "").split(",")
if not allowed_origins or allowed_origins == [""]:
    allowed_origins = [
        settings.frontend_url,
        "http://localhost:5173",              # Vite dev server
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(player.router)
app.include_router(admin.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Snakes & Ladders Promo API",
        "version": APP_VERSION,
        "environment": settings.environment,
        "docs": "/docs",
    }
