"""
Rair Users FastAPI Application

Main entry point for the users API.
Uses the generic common/ library for infrastructure and app/ for business logic.
"""

import logging
import secrets
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo import IndexModel
from starlette.middleware.sessions import SessionMiddleware

# Common library imports
from common.database import MongoDB
from common.utils import success_response, register_error_handlers

# App-specific imports
from app.config import settings
from app.models import USERS_COLLECTION
from app.routers import users_router
from app.dependencies import init_services

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# =============================================================================
# Database Instance
# =============================================================================
main_db = MongoDB()

USER_INDEXES = {
    USERS_COLLECTION: [
        IndexModel("publicAddress", unique=True, name="publicAddress_unique"),
    ],
}


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown tasks like database connections
    and service initialization.
    """
    logger.info("Starting Rair Users API...")

    if settings.is_production():
        settings.validate_required()

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
        indexes=USER_INDEXES,
    )

    init_services(db=main_db.db, settings=settings)
    logger.info("Rair Users API started successfully!")

    yield

    logger.info("Shutting down Rair Users API...")
    await main_db.disconnect()
    logger.info("Rair Users API shut down complete.")


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="Rair Users API",
    description="User registration, profiles, exports and age verification",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

register_error_handlers(app)

# =============================================================================
# Middleware
# =============================================================================
session_secret = settings.SESSION_SECRET
if not session_secret:
    logger.warning("SESSION_SECRET not set, using a random per-process secret")
    session_secret = secrets.token_urlsafe(32)

app.add_middleware(
    SessionMiddleware,
    secret_key=session_secret,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE_SECONDS,
    https_only=settings.is_production(),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# Include Routers
# =============================================================================
API_PREFIX = "/api"

app.include_router(users_router, prefix=API_PREFIX, tags=["Users"])


# =============================================================================
# Health Check Endpoint
# =============================================================================
@app.get("/health", tags=["Health"])
async def health():
    """
    Health check endpoint.

    Returns the status of the API and database connection.
    """
    return success_response({
        "status": "ok",
        "database": main_db.is_connected,
    })


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
