"""API router and endpoint organization."""

from fastapi import APIRouter

from content_checker.api.endpoints import comparison

router = APIRouter()

router.include_router(comparison.router, tags=["Comparison"])
