import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from user_account_svc.config import Settings, get_settings
from user_account_svc.dependencies import AppContext
from user_account_svc.exception_handlers import setup_exception_handlers
from user_account_svc.middleware import BodySizeLimitMiddleware
from user_account_svc.routers.users import router as users_router
from user_account_svc.store import UserStore

API_VERSION = "1.0.0"
DOCS_URL = "/api-docs"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    context: AppContext = app.state.context
    await context.store.initialize()
    try:
        yield
    finally:
        context.store.close()


def create_app(settings: Optional[Settings] = None, store: Optional[UserStore] = None) -> FastAPI:
    """
    Build the FastAPI application.

    `settings` defaults to the environment-derived settings and `store` to a
    MongoDB store at `settings.mongo_uri`; tests pass their own of either.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Users API",
        description="User registration, login and profile management.",
        version=API_VERSION,
        debug=settings.debug,
        docs_url=DOCS_URL,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.context = AppContext.from_settings(settings, store=store)

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    setup_exception_handlers(app)

    # Include users router
    app.include_router(users_router)

    return app
