from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import DEFAULT_ENCRYPTION_SECRET, DEFAULT_SESSION_SECRET, Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.account_service import AccountService
from ..application.services.messaging_service import MessagingService
from ..application.services.profile_service import ProfileService
from ..domain.errors import AppError
from ..infrastructure.persistence.sqlite import SQLiteDatabase
from ..infrastructure.repositories.message_repository import MessageRepository
from ..infrastructure.repositories.user_repository import UserRepository
from ..infrastructure.storage.photo_store import PhotoStore
from ..presentation.api.routers import accounts as accounts_router
from ..presentation.api.routers import messages as messages_router
from ..presentation.api.routers import photos as photos_router
from ..presentation.api.routers import users as users_router
from ..services.cipher import ContentCipher
from ..services.email_service import EmailService
from ..services.session_service import SessionTokenService

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def create_application(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title=settings.app_name, lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def no_store_for_api(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            response.headers.update(NO_STORE_HEADERS)
        return response

    _register_error_handlers(app)

    app.include_router(accounts_router.router)
    app.include_router(users_router.router)
    app.include_router(messages_router.router)
    app.include_router(photos_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Missing or invalid fields", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(sqlite3.Error)
    async def store_error(request: Request, exc: sqlite3.Error) -> JSONResponse:
        logger.exception("Store error while handling %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        if settings.encryption_secret == DEFAULT_ENCRYPTION_SECRET:
            logger.warning(
                "ENCRYPTION_SECRET is using the default value. Configure a per-deployment secret in production."
            )
        if settings.session_secret == DEFAULT_SESSION_SECRET:
            logger.warning(
                "SESSION_SECRET is using the default value. Configure a secure secret in production."
            )
        if settings.trust_user_id_header:
            logger.warning(
                "TRUST_USER_ID_HEADER is enabled: the unauthenticated x-user-id header is accepted as identity."
            )

        database = SQLiteDatabase(
            settings.database_path,
            pool_size=settings.db_pool_size,
            timeout=settings.db_timeout_seconds,
        )
        users = UserRepository(database)
        messages = MessageRepository(database)
        cipher = ContentCipher.from_secret(settings.encryption_secret, settings.encryption_salt)
        photos = PhotoStore(settings.upload_dir)
        photos.ensure_directory()
        email_service = EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
            timeout=settings.smtp_timeout_seconds,
        )
        session_service = SessionTokenService(
            settings.session_secret, expiration_hours=settings.session_exp_hours
        )

        container = ApplicationContainer(
            settings=settings,
            database=database,
            cipher=cipher,
            email_service=email_service,
            session_service=session_service,
            account_service=AccountService(
                users,
                email_service,
                bcrypt_rounds=settings.bcrypt_rounds,
                expose_debug_codes=settings.expose_debug_codes,
            ),
            messaging_service=MessagingService(messages, users, cipher),
            profile_service=ProfileService(
                users,
                messages,
                photos,
                cipher,
                max_upload_size=settings.max_upload_size,
            ),
        )
        app.state.container = container  # type: ignore[attr-defined]

        try:
            yield
        finally:
            database.close()

    return lifespan
