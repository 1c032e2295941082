# main.py
# Entry point for the FastAPI application

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from pymongo.database import Database
from app.api.routes import router
from app.dependencies import get_db, get_settings
from app.utils.db_setup import setup_db_indexes
import os

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s: %(message)s",
    handlers=[logging.FileHandler("backend.log"), logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

# Suppress pymongo debug logs
logging.getLogger("pymongo").setLevel(logging.WARNING)

# Load settings (also reads .env)
settings = get_settings()
logger.info("Environment variables loaded from .env")

# Validate required environment variables
if not settings.mongo_uri:
    logger.error("Missing required environment variables: ['MONGO_URI']")
    raise Exception("Missing required environment variables: ['MONGO_URI']")

if settings.uses_default_secret:
    logger.warning("JWT_SECRET_KEY is not set, using the development default")

if not settings.smtp.enabled:
    logger.warning("SMTP is not configured, password reset emails will not be delivered")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        setup_db_indexes(get_db())
    except Exception as e:
        logger.error(f"Failed to set up MongoDB indexes: {str(e)}")
        raise Exception(f"MongoDB connection failed: {str(e)}")
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Feedback Platform Auth API",
    description="Registration, login, two-factor and password reset for the feedback platform",
    version="1.0.0",
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
    lifespan=lifespan,
)

# Add security middleware
if settings.environment == "production":
    allowed_hosts = (
        os.getenv("ALLOWED_HOSTS", "").split(",")
        if os.getenv("ALLOWED_HOSTS")
        else ["*"]
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)


# Add security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Cache-Control"] = "no-store"
    if settings.environment == "production":
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
    return response


# Include API routes
app.include_router(router, prefix="/api")
logger.info("API routes included")


# Health check endpoint
@app.get("/")
def root(db: Database = Depends(get_db)):
    """Return a basic health check message."""
    logger.info("Health check endpoint accessed")
    try:
        db.command("ping")
        return {"message": "Feedback Platform Auth API is running"}
    except Exception as e:
        logger.error(f"MongoDB health check failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Database connection error")
