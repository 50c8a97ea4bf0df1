"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.infrastructure.database import engine, Base, SessionLocal
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.exceptions import AppError, app_error_handler, global_exception_handler
from app.core.security import hash_password

# Import all models so SQLAlchemy knows about them
from app.domain.models.user import User
from app.domain.models.address import ShippingAddress, BillingAddress  # noqa: F401
from app.domain.models.account_flags import ResetUser, InactiveUser, Admin  # noqa: F401
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

from app.interfaces.api.users import router as users_router

settings = get_settings()

configure_logging()
logger = structlog.get_logger(__name__)


def seed_default_admin() -> None:
    """Create the configured admin account if it does not exist yet."""
    if not (settings.DEFAULT_ADMIN_EMAIL and settings.DEFAULT_ADMIN_PASSWORD):
        return

    db = SessionLocal()
    try:
        users = SQLAlchemyUserRepository(db, User)
        admin = users.get_by_email(settings.DEFAULT_ADMIN_EMAIL)
        if admin is None:
            admin = users.create_with_addresses(
                {
                    "first_name": "Admin",
                    "last_name": "User",
                    "email": settings.DEFAULT_ADMIN_EMAIL,
                    "password_hash": hash_password(settings.DEFAULT_ADMIN_PASSWORD),
                }
            )
            logger.info("Default admin user created", email=settings.DEFAULT_ADMIN_EMAIL)
        users.grant_admin(admin.id)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting Accounts Backend...", env=settings.ENVIRONMENT)

    # Create DB tables (dev only — use migrations in production)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    seed_default_admin()

    yield

    logger.info("Accounts Backend stopped")


app = FastAPI(
    title="Accounts Backend",
    description="User accounts API — registration, login, password reset and profiles",
    version="1.0.0",
    lifespan=lifespan,
)

setup_middleware(app)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router)


@app.get("/")
def root():
    return {
        "name": "Accounts Backend",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
