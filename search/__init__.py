"""Search API package."""

from fastapi import APIRouter

from search import api

router = APIRouter()
router.include_router(api.router)

__all__ = ["router"]
