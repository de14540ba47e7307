"""Marketplace API endpoints: buying verified claims and sale history."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field
from pydantic.alias_generators import to_camel

from ...domain.services.marketplace_query_service import MarketplaceQueryService
from ...domain.services.settlement_service import SettlementService
from ...infrastructure.dependencies import get_query_service, get_settlement_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/marketplace", tags=["marketplace"])


class PurchaseRequest(BaseModel):
    """Request model for buying a claim."""

    claim: str = Field(
        default="",
        validation_alias=AliasChoices("claim", "claimText"),
        description="Claim text to purchase",
    )
    buyer_account_id: str = Field(default="", description="Buyer's ledger account id")
    payment_proof_tx_id: str = Field(default="", description="Id of the buyer's completed payment")

    class Config:
        """Pydantic model configuration."""
        alias_generator = to_camel
        populate_by_name = True


@router.post("/buy")
async def buy_claim(
    request: PurchaseRequest,
    settlement: SettlementService = Depends(get_settlement_service),
) -> JSONResponse:
    """Buy a claim; only claims verified TRUE can be purchased.

    Args:
        request: Purchase request

    Returns:
        201 with the settlement result, or 200 with status REJECTED and the
        verification when the claim is not TRUE
    """
    result = await settlement.purchase_claim(
        request.claim,
        request.buyer_account_id,
        request.payment_proof_tx_id,
    )
    return JSONResponse(status_code=201 if result.success else 200, content=result.to_document())


@router.get("/sales")
async def list_sales(
    limit: int = Query(default=50, ge=1, le=500),
    buyer: Optional[str] = Query(default=None),
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    """List sales, newest first."""
    return {"success": True, **await queries.list_sales(limit=limit, buyer=buyer)}


@router.get("/stats")
async def marketplace_stats(
    queries: MarketplaceQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    """Marketplace-wide sales statistics."""
    return {"success": True, "stats": await queries.marketplace_stats()}
