# main.py
from dotenv import load_dotenv
load_dotenv()
from contextlib import asynccontextmanager
from typing import Optional
import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
import uvicorn

from faction_badges.api import (
    auth_api_router,
    badge_api_router,
    health_api_router,
    users_api_router,
)
from faction_badges.core.config import Settings, get_settings
from faction_badges.core.dependencies import build_github_client, build_identity_store
from faction_badges.core.exceptions import (
    ConfigurationException,
    ExternalServiceException,
    NotFoundException,
    StoreException,
    UnauthorizedException,
    ValidationException,
)
from faction_badges.repositories import IdentityStore

logger = logging.getLogger("MAIN")
access_logger = logging.getLogger("HTTP_ACCESS")

APP_LOGGERS = [
    "MAIN",
    "HTTP_ACCESS",
    "CORE_CONFIG",
    "CORE_DATABASE",
    "CORE_DEPENDENCIES",
    "REDIS_CLIENT",
    "GITHUB_OAUTH",
    "IDENTITY_STORE",
    "SESSION_RESOLVER",
    "AUTH_API",
    "USERS_API",
    "HEALTH_API_LOGGER",
]

INDEX_CACHE_CONTROL = "no-store, no-cache, must-revalidate, max-age=0"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


def configure_logging(level: str) -> None:
    """Route application loggers through uvicorn's handler when running under uvicorn."""
    uvicorn_logger = logging.getLogger("uvicorn")
    if not uvicorn_logger.handlers:
        logging.basicConfig(
            level=level.upper(),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    for logger_name in APP_LOGGERS:
        app_logger = logging.getLogger(logger_name)
        app_logger.setLevel(level.upper())
        # Ensure it has a handler (use uvicorn's handler)
        if not app_logger.handlers and uvicorn_logger.handlers:
            app_logger.addHandler(uvicorn_logger.handlers[0])
            app_logger.propagate = False


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationException)
    async def validation_handler(request: Request, exc: ValidationException):
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request")

    @app.exception_handler(UnauthorizedException)
    async def unauthorized_handler(request: Request, exc: UnauthorizedException):
        return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized")

    @app.exception_handler(NotFoundException)
    async def not_found_handler(request: Request, exc: NotFoundException):
        return _error(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(ConfigurationException)
    async def not_configured_handler(request: Request, exc: ConfigurationException):
        return _error(status.HTTP_501_NOT_IMPLEMENTED, exc.message)

    @app.exception_handler(StoreException)
    async def store_failure_handler(request: Request, exc: StoreException):
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc.message}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")

    @app.exception_handler(ExternalServiceException)
    async def upstream_failure_handler(request: Request, exc: ExternalServiceException):
        logger.error(f"Upstream failure on {request.method} {request.url.path}: {exc.message}")
        return _error(status.HTTP_502_BAD_GATEWAY, "Upstream service error")

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def create_app(
    settings: Optional[Settings] = None,
    identity_store: Optional[IdentityStore] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Application settings (defaults to the cached environment settings)
        identity_store: Store to use instead of building one from settings at startup

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        owns_store = app.state.identity_store is None
        if owns_store:
            app.state.identity_store = build_identity_store(settings)
        if not settings.github_configured:
            logger.warning(
                "GitHub OAuth is not configured. Set GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET in .env"
            )
        logger.info(f"Server listening on {settings.get_base_url()}")
        yield
        if owns_store:
            app.state.identity_store.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.identity_store = identity_store
    app.state.github_client = build_github_client(settings)

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        duration_ms = (time.perf_counter() - start) * 1000
        access_logger.info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f} ms"
        )
        return response

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=None,
        same_site="lax",
        https_only=settings.get_base_url().startswith("https://"),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_api_router)
    app.include_router(users_api_router)
    app.include_router(health_api_router)
    app.include_router(badge_api_router)

    public_dir = settings.public_dir

    @app.get("/", include_in_schema=False)
    @app.get("/index.html", include_in_schema=False)
    def index():
        return FileResponse(
            public_dir / "index.html",
            media_type="text/html",
            headers={"Cache-Control": INDEX_CACHE_CONTROL},
        )

    app.mount("/", StaticFiles(directory=public_dir), name="public")

    return app


app = create_app()

if __name__ == "__main__":
    settings = get_settings()
    # Serverless platforms import `app`; only bind a port when run directly
    if settings.vercel:
        raise SystemExit("Not starting a server on Vercel; import faction_badges.main:app instead")

    env = settings.environment.lower()
    if env == "production":
        uvicorn.run("faction_badges.main:app", host="0.0.0.0", port=settings.port, workers=4)
    else:
        # Development: Single worker with hot reload
        uvicorn.run("faction_badges.main:app", host="0.0.0.0", port=settings.port, reload=True)
