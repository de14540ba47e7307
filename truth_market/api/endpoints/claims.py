"""Claim catalogue API endpoints."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ...domain.services.claim_service import ClaimService
from ...infrastructure.dependencies import get_claim_service

router = APIRouter(prefix="/api/claims", tags=["claims"])


class VerifyClaimRequest(BaseModel):
    """Request model for verifying a claim."""

    claim: str = Field(default="", description="Claim text to verify")
    account_id: Optional[str] = Field(default=None, description="Submitter account id")

    class Config:
        """Pydantic model configuration."""
        alias_generator = to_camel
        populate_by_name = True


@router.post("/verify")
async def verify_claim(
    request: VerifyClaimRequest,
    claims: ClaimService = Depends(get_claim_service),
) -> Dict[str, Any]:
    """Verify a claim with AI and store the result."""
    claim = await claims.verify_and_record(request.claim, request.account_id)
    return {"success": True, "claim": claim}


@router.get("")
async def list_claims(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    verdict: Optional[str] = Query(default=None),
    claims: ClaimService = Depends(get_claim_service),
) -> Dict[str, Any]:
    """Page through stored claims."""
    return {"success": True, **await claims.list_claims(limit=limit, offset=offset, verdict=verdict)}


@router.get("/recent")
async def recent_claims(
    limit: int = Query(default=10, ge=1, le=100),
    claims: ClaimService = Depends(get_claim_service),
) -> Dict[str, Any]:
    recent = await claims.recent(limit)
    return {"success": True, "claims": recent, "count": len(recent)}


@router.get("/{claim_id}")
async def get_claim(
    claim_id: str,
    claims: ClaimService = Depends(get_claim_service),
) -> Dict[str, Any]:
    return {"success": True, "claim": await claims.get(claim_id)}
