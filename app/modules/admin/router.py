"""Admin API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from app.core.config import get_settings
from app.modules.admin.schemas import AdminOverviewRead
from app.modules.admin.service import AdminService, get_admin_service

router = APIRouter(prefix="/admin", tags=["admin"])
settings = get_settings()


@router.get("/overview", response_model=AdminOverviewRead)
async def get_admin_overview(
    service: AdminService = Depends(get_admin_service),
    actor_ref: str | None = Header(default=None, alias="X-Admin-Ref"),
) -> AdminOverviewRead:
    """Status counts, revenue and outbox health for the dashboard."""
    return await service.get_overview(actor_ref, max_retries=settings.outbox_max_retries)
