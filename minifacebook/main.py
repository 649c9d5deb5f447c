# minifacebook/main.py
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from minifacebook.core.config import Settings, settings as default_settings
from minifacebook.core.db import Base, make_engine, make_session_factory
from minifacebook.core.errors import AppError, DependencyFailure
from minifacebook.core.log import configure_logging
from minifacebook.core.security import PasswordHasher, SessionTokens
from minifacebook.services.accounts import CredentialStore
from minifacebook.services.auth import AuthService
from minifacebook.services.mailer import build_dispatcher
from minifacebook.services.upload_to_azure import ImageUploader

import minifacebook.models  # noqa: F401  테이블 메타데이터 등록

from minifacebook.routers.health import router as health_router
from minifacebook.routers.auth import router as auth_router
from minifacebook.routers.users import router as users_router
from minifacebook.routers.posts import router as posts_router
from minifacebook.routers.comments import router as comments_router
from minifacebook.routers.image import router as image_router

logger = structlog.get_logger()

routers = [
    health_router,
    auth_router,
    users_router,
    posts_router,
    comments_router,
    image_router,
]


def error_body(code: str, message: str) -> dict:
    return {"success": False, "error": code, "message": message}


async def app_error_handler(request: Request, exc: AppError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message), headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in e.get("loc", ()) if p != "body") for e in exc.errors()]
    logger.info("request_validation_failed", path=request.url.path, fields=fields)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("validation_error", "Please fill in all fields correctly"),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("database_error", path=request.url.path, error=str(exc))
    err = DependencyFailure()
    return JSONResponse(status_code=err.status_code, content=error_body(err.code, err.message))


def install_openapi(app: FastAPI) -> None:
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description="MiniFacebook API",
            routes=app.routes,
        )
        comps = schema.setdefault("components", {})
        schemes = comps.setdefault("securitySchemes", {})
        schemes["BearerAuth"] = {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
        schema["security"] = [{"BearerAuth": []}]
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    dispatcher=None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    engine = engine or make_engine(settings.DATABASE_URL)
    session_factory = make_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        logger.info("database_ready", backend=engine.url.get_backend_name(), tables=sorted(Base.metadata.tables))
        yield
        engine.dispose()

    app = FastAPI(title="MiniFacebook API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 전역 대신 app.state 에 한 번만 만들어 둠
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.auth_service = AuthService(
        store=CredentialStore(session_factory),
        hasher=PasswordHasher.from_settings(settings),
        sessions=SessionTokens.from_settings(settings),
        dispatcher=dispatcher or build_dispatcher(settings),
        base_url=settings.PUBLIC_BASE_URL,
    )
    app.state.image_uploader = ImageUploader.from_settings(settings)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    for r in routers:
        app.include_router(r)

    install_openapi(app)
    return app


app = create_app()
