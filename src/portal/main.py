import asyncio
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import settings, setup_logging
from .database import engine
from .errors import PortalError
from .routes.auth import router as auth_router
from .routes.users import router as users_router

setup_logging()
logger = logging.getLogger(__name__)


async def _run_migrations() -> None:
    """Run Alembic migrations on startup."""
    logger.info("Running database migrations...")
    proc = await asyncio.create_subprocess_exec(
        sys.executable, "-m", "alembic", "-c", settings.alembic_config,
        "upgrade", "head",
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        # stderr can echo the connection string; keep it out of the exception
        logger.error("Migration failed: %s", stderr.decode())
        raise RuntimeError("Database migration failed")
    logger.info("Migrations applied: %s", stdout.decode().strip())


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.run_migrations:
        await _run_migrations()
    yield
    await engine.dispose()


app = FastAPI(title="Portal API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_urls,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(users_router)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request."
    return JSONResponse({"message": message}, status_code=400)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"message": "Internal server error."}, status_code=500)


@app.get("/health")
async def health():
    pg_status = "disconnected"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        pg_status = "connected"
    except Exception:
        logger.warning("Health check could not reach the database")

    return {
        "status": "ok" if pg_status == "connected" else "degraded",
        "postgres": pg_status,
    }
