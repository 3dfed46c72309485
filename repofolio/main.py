import logging
from functools import partial
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from repofolio.config import Settings
from repofolio.core.rate_limit import configure_rate_limits, limiter
from repofolio.core.responses import error_response
from repofolio.database.supabase_client import SupabaseClient
from repofolio.modules.attachments import routes as attachments_routes
from repofolio.modules.auth import routes as auth_routes
from repofolio.modules.documentation import routes as documentation_routes
from repofolio.modules.github import routes as github_routes
from repofolio.modules.github.client import GitHubClient
from repofolio.modules.profiles import routes as profiles_routes
from repofolio.modules.projects import routes as projects_routes

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path"))
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), getattr(exc, "code", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(400, _format_validation_errors(exc), "validation_error")

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return error_response(429, f"Rate limit exceeded: {exc.detail}", "rate_limited")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return error_response(500, str(exc) or exc.__class__.__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. Settings are read once here; missing secrets abort startup."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.supabase = SupabaseClient(settings)
    app.state.github_client_factory = partial(
        GitHubClient,
        base_url=settings.github_api_url,
        graphql_url=settings.github_graphql_url,
        timeout_seconds=settings.github_timeout_seconds,
    )
    configure_rate_limits(settings)
    app.state.limiter = limiter
    register_exception_handlers(app)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include module routes
    app.include_router(auth_routes.router, prefix="/api")
    app.include_router(profiles_routes.router, prefix="/api")
    app.include_router(github_routes.router, prefix="/api")
    app.include_router(projects_routes.router, prefix="/api")
    app.include_router(documentation_routes.router, prefix="/api")
    app.include_router(attachments_routes.router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        logger.info("Application startup (%s)", settings.environment)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutdown")

    @app.get("/")
    async def root():
        return {"message": "Welcome to repofolio-backend", "status": "healthy"}

    @app.get("/health")
    @limiter.exempt
    async def health():
        return {"status": "healthy"}

    @app.get("/ready")
    @limiter.exempt
    async def ready():
        """Readiness probe: configuration was validated at startup."""
        return {"status": "ready"}

    return app


app = create_app()
