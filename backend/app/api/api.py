"""
API Router Aggregator.

Combines all routers into a single router mounted under ``/api``.
"""

from fastapi import APIRouter

from app.api.v1 import admin, auth, content, pages, submissions, users

api_router = APIRouter()

# Include all routers with their prefixes and tags
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

api_router.include_router(
    admin.router,
    tags=["Admin"],
)

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
)

api_router.include_router(
    content.router,
    tags=["Content"],
)

api_router.include_router(
    pages.router,
    tags=["Pages"],
)

api_router.include_router(
    submissions.router,
    tags=["Submissions"],
)
