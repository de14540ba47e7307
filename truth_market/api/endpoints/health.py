"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...infrastructure.dependencies import ServiceContainer, get_service_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    container: ServiceContainer = Depends(get_service_container),
) -> Dict[str, Any]:
    """Check the health of all service components.

    Returns:
        Status of the AI provider, ledger gateway, agent registry and audit log
    """
    verification = container.get("verification_service")
    settlement = container.get("settlement_service")
    audit = container.get("audit_logger")

    return {
        "status": "healthy",
        "version": "0.1.0",
        "ai": {
            "available": container.ai_available,
            "cache": verification.stats(),
        },
        "ledger": {
            "available": container.ledger.is_available,
            **container.ledger.operator_info(),
        },
        "agent": {
            "id": settlement.truth_agent_id,
            "registryEnabled": container.agent_registry_enabled,
        },
        "audit": {"enabled": audit.enabled},
    }
