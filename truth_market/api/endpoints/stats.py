"""System statistics API endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ...domain.services.marketplace_query_service import MarketplaceQueryService
from ...infrastructure.dependencies import get_query_service

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("")
async def system_stats(
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    return {"success": True, "stats": await queries.system_stats()}


@router.get("/leaderboard")
async def leaderboard(
    limit: int = Query(default=10, ge=1, le=100),
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    """Top buyers by purchase count."""
    return {"success": True, "leaderboard": await queries.leaderboard(limit)}


@router.get("/activity")
async def activity(
    limit: int = Query(default=20, ge=1, le=200),
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    """Recent verifications, purchases and badge mints."""
    events = await queries.activity(limit)
    return {"success": True, "activity": events, "count": len(events)}


@router.get("/analytics")
async def analytics(
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    return {"success": True, "analytics": await queries.analytics()}
