"""User profile API endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ...domain.services.marketplace_query_service import MarketplaceQueryService
from ...infrastructure.dependencies import get_query_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(
    limit: int = Query(default=50, ge=1, le=500),
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    return {"success": True, **await queries.list_users(limit)}


@router.get("/{account_id}")
async def get_profile(
    account_id: str,
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    """Get a user's profile, creating it on first lookup."""
    return {"success": True, "user": await queries.get_or_create_profile(account_id)}


@router.get("/{account_id}/dashboard")
async def get_dashboard(
    account_id: str,
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    """Get a user's purchases, badges and progress towards the next badge."""
    return {"success": True, **await queries.dashboard(account_id)}
