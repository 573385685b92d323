"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.auth import router as auth_router
from api.v1.settings import router as settings_router
from api.v1.users import router as users_router
from api.v1.votings import router as votings_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
router.include_router(users_router, prefix="/users", tags=["Users"])
router.include_router(votings_router, prefix="/votings", tags=["Votings"])
router.include_router(settings_router, prefix="/settings", tags=["App Settings"])
