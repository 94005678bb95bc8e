from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.database import Database
from app.config import CORS_ORIGINS, DATABASE_URL, IS_PRODUCTION
from app.exceptions import register_exception_handlers
from app.internal.identity import IdentityProvider, create_identity_provider
from app.internal.admin import create_admin
from app.routers import router, user, issue, admin, staff, payment, develop
from fastapi_pagination import add_pagination
from fastapi_pagination.utils import disable_installed_extensions_check
from contextlib import asynccontextmanager
from typing import Optional
import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database

    logger.info("Connecting to database...")
    database.connect()

    yield

    database.close()


def get_application(
    database: Optional[Database] = None,
    identity_provider: Optional[IdentityProvider] = None
) -> FastAPI:
    """
    Function responsible for preparing the FastAPI application.

    The store and identity provider are created from the environment unless given.
    """

    fapp = FastAPI(
        title="CivicCare",
        swagger_ui_parameters={
            "syntaxHighlight.theme": "obsidian"
        },
        lifespan=lifespan
    )

    fapp.state.database = database or Database(DATABASE_URL)
    fapp.state.identity_provider = identity_provider or create_identity_provider()

    fapp.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    disable_installed_extensions_check()

    register_exception_handlers(fapp)

    fapp.include_router(router)
    fapp.include_router(user.router)
    fapp.include_router(issue.router)
    fapp.include_router(admin.router)
    fapp.include_router(staff.router)
    fapp.include_router(payment.router)

    if not IS_PRODUCTION:
        fapp.include_router(develop.router)

    add_pagination(fapp)

    create_admin(fapp, fapp.state.database.engine)

    return fapp



app = get_application()
