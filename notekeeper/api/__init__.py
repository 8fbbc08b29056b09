"""API routes."""

from fastapi import APIRouter

from notekeeper.api import admin, auth, health, notes

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(notes.router, prefix="/notes", tags=["notes"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
