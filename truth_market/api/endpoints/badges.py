"""Badge API endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ...domain.services.marketplace_query_service import MarketplaceQueryService
from ...infrastructure.dependencies import get_query_service

router = APIRouter(prefix="/api/badges", tags=["badges"])


@router.get("")
async def list_badges(
    limit: int = Query(default=50, ge=1, le=500),
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    return {"success": True, **await queries.list_badges(limit)}


@router.get("/stats")
async def badge_stats(
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    """Badge totals and tier distribution."""
    return {"success": True, "stats": await queries.badge_stats()}


@router.get("/{account_id}")
async def badges_for_account(
    account_id: str,
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    badges = await queries.badges_for(account_id)
    return {"success": True, "badges": badges, "count": len(badges)}
