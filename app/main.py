import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import auth, chat, data, me
from app.core.config import Settings
from app.core.exceptions import AppError
from app.core.logging import configure_logging
from app.repositories import Repository, build_repository
from app.services.chat_gateway import ChatGateway
from app.services.sheets_mirror import build_mirror

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request format", "details": details})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.repository is None:
            app.state.repository = build_repository(settings)
        yield
        if app.state.mirror is not None:
            app.state.mirror.close()

    app = FastAPI(title="TaxSage API", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository
    app.state.mirror = build_mirror(settings)
    app.state.chat_gateway = ChatGateway.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth.router)
    app.include_router(data.router)
    app.include_router(me.router)
    app.include_router(chat.router)
    if settings.debug_routes_enabled:
        app.include_router(me.debug_router)

    @app.get("/")
    def root():
        return {"message": "TaxSage financial advisory API"}

    return app


app = create_app()
