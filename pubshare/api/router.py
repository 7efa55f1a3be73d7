from __future__ import annotations

from fastapi import APIRouter

from pubshare.api.routers import auth, publications, users

router = APIRouter(prefix="/api/v1")
router.include_router(auth.router)
router.include_router(publications.router)
router.include_router(users.router)
