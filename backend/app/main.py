import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import DEFAULT_JWT_SECRET, settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.credential_store import CredentialStore
from app.services.uploads import upload_root

# Import all models so SQLAlchemy can discover them for table creation
from app.models import User, Service, Testimonial, Contact, NewsletterSubscriber  # noqa: F401

# Import API router
from app.api.api import api_router

logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables and the first admin on startup."""
    configure_logging()
    if settings.JWT_SECRET == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is the development placeholder; set it before deploying")

    Base.metadata.create_all(bind=engine)
    upload_root()
    bootstrap_admin()
    yield


def bootstrap_admin() -> None:
    """Create the configured admin account when the users table is empty."""
    db = SessionLocal()
    try:
        admin = CredentialStore(db).bootstrap_admin(
            settings.BOOTSTRAP_ADMIN_EMAIL.strip().lower(),
            settings.BOOTSTRAP_ADMIN_PASSWORD,
        )
        if admin is not None:
            logger.info("Bootstrapped admin account %s", admin.email)
    finally:
        db.close()


app = FastAPI(
    title=settings.APP_NAME,
    description="Career consultancy site: registration, content moderation and visitor intake",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# CORS Middleware - allowlist from env (comma-separated)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Stored uploads (resumes, fraud evidence) are served back by relative path
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {"message": f"Welcome to {settings.APP_NAME} API"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Include API router with /api prefix
app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
