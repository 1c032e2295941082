# app/api/routes.py
# Versioned API router grouping the auth and user routes

import logging
from fastapi import APIRouter
from app.routes.auth import router as auth_router
from app.routes.users import router as users_router

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()

router.include_router(auth_router, prefix="/v1/auth", tags=["auth"])
router.include_router(users_router, prefix="/v1/users", tags=["users"])
logger.debug("Auth and user routes registered under /v1")
