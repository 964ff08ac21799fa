from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from config import validate_config
from src.api.utils.identity import IdentityProvider

from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)

OAUTH_STATE_COOKIE = "intranet_oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def create_app(ApplicationConfig, identity_provider: IdentityProvider = None) -> FastAPI:
    validate_config(ApplicationConfig)

    app = FastAPI(title="Intranet Access API", version="0.1.0")
    app.state.config = ApplicationConfig
    app.state.identity_provider = identity_provider or IdentityProvider(ApplicationConfig)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # authlib keeps the OAuth state and the pending invitation token here
    app.add_middleware(
        SessionMiddleware,
        secret_key=ApplicationConfig.OAUTH_STATE_SECRET,
        session_cookie=OAUTH_STATE_COOKIE,
        max_age=OAUTH_STATE_MAX_AGE,
        same_site="lax",
        https_only=bool(ApplicationConfig.SESSION_COOKIE_SECURE),
    )

    from src.api.routes import admin, auth, health_check, users

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(users.router, tags=["Users"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
