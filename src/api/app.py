from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


def _code(error) -> str:
    return getattr(error.code, "value", error.code)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": _code(exc.base_error), "message": exc.base_error.message}
    if exc.base_error.details:
        error_dict["details"] = exc.base_error.details
    logger.warning(f"Client error: {error_dict['code']} {request.url.path}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": _code(exc.base_error), "message": "Internal server error"}
    logger.error(f"Server error: {error_dict['code']} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(level=ApplicationConfig.LOG_LEVEL)

    app = FastAPI(title=ApplicationConfig.APP_NAME, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import auth, health_check, two_factor

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(two_factor.router, tags=["Two-Factor"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
