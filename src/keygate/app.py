"""FastAPI application factory for Keygate."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from keygate.common.config import KeygateSettings, get_settings
from keygate.common.exceptions import KeygateError
from keygate.common.logging import get_logger, setup_logging
from keygate.common.schemas import ErrorResponse, HealthResponse
from keygate.deps import build_services

logger = get_logger("app")


def create_app(settings: KeygateSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    services = build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await services.startup()
        logger.info("keygate started", extra={"context": {"db": settings.db_backend}})
        yield
        await services.shutdown()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(KeygateError)
    async def keygate_error_handler(request: Request, exc: KeygateError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.code)
        body = ErrorResponse(error=type(exc).__name__, code=exc.code, detail=exc.message)
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=settings.api_version)

    # Mount routers
    from keygate.users.router import router as users_router
    from keygate.devices.router import router as devices_router
    from keygate.audit.router import router as audit_router
    from keygate.dashboard.router import router as dashboard_router
    from keygate.activation.router import router as activation_router

    prefix = settings.api_prefix
    app.include_router(users_router, prefix=prefix, tags=["users"])
    app.include_router(devices_router, prefix=prefix, tags=["devices"])
    app.include_router(audit_router, prefix=prefix, tags=["logs"])
    app.include_router(dashboard_router, prefix=prefix, tags=["dashboard"])
    app.include_router(activation_router, prefix=prefix, tags=["client"])

    return app
