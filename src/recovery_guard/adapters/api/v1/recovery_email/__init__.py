"""Recovery email router package: validation and update endpoints."""

from fastapi import APIRouter

from .routes import update as update_route
from .routes import validate as validate_route

router = APIRouter(tags=["recovery-email"])

router.include_router(validate_route.router, prefix="/recovery-email/validate")
router.include_router(update_route.router, prefix="/recovery-email")

__all__ = ["router"]
