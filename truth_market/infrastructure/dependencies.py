"""Dependency injection configuration for hexagonal architecture."""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Depends

from ..domain.ports.agent_registry import AgentRegistry
from ..domain.ports.ai_provider import AIProvider
from ..domain.ports.ledger_provider import LedgerProvider
from ..domain.ports.record_store import RecordStore
from ..domain.services.agent_proof_service import AgentProofService
from ..domain.services.audit_service import AuditLogger
from ..domain.services.claim_service import ClaimService
from ..domain.services.marketplace_query_service import MarketplaceQueryService
from ..domain.services.settlement_service import SettlementService
from ..domain.services.verification_service import FallbackClassifier, VerificationService
from .ai.factory import AIProviderFactory
from .config import MarketConfig
from .ledger.agent_registry_adapter import GatewayAgentRegistry
from .ledger.hedera_gateway_adapter import HederaGatewayAdapter, LedgerGatewayConfig
from .storage.json_record_store import JsonRecordStore

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection.

    Owns the lifecycle of every adapter; ``startup`` and ``shutdown`` are
    called by the process entry point. Adapters may be passed in to replace
    the defaults built from ``config``.
    """

    def __init__(
        self,
        config: Optional[MarketConfig] = None,
        store: Optional[RecordStore] = None,
        ledger: Optional[LedgerProvider] = None,
        ai_provider: Optional[AIProvider] = None,
        agent_registry: Optional[AgentRegistry] = None,
        use_ai: bool = True,
    ):
        """Initialize service container."""
        self.config = config or MarketConfig.from_env()
        self._store = store
        self._ledger = ledger
        self._ai_provider = ai_provider
        self._agent_registry = agent_registry
        self._use_ai = use_ai
        self._ai_factory = AIProviderFactory()
        self._services: Dict[str, Any] = {}
        self._started = False

    async def startup(self) -> None:
        """Create adapters and wire the domain services."""
        if self._started:
            return
        logger.info("🔧 Setting up service container...")

        if self._store is None:
            self._store = JsonRecordStore(self.config.data_dir)
        await self._store.initialize()

        if self._ledger is None:
            self._ledger = HederaGatewayAdapter(LedgerGatewayConfig.from_env())
        await self._ledger.initialize()

        if self._ai_provider is None and self._use_ai:
            self._ai_provider = await self._ai_factory.try_create_provider("groq")

        if self._agent_registry is None and self.config.agent_registry_contract:
            self._agent_registry = GatewayAgentRegistry(
                self.config.agent_registry_contract,
                LedgerGatewayConfig.from_env(),
            )

        verification_service = VerificationService(
            self._ai_provider,
            fallback=FallbackClassifier(self.config.unknown_claim_policy),
        )
        audit = AuditLogger(self._ledger, self.config.topic_id)
        agent_proofs = AgentProofService(self._agent_registry, self.config.truth_agent_id)

        self._services = {
            "verification_service": verification_service,
            "audit_logger": audit,
            "settlement_service": SettlementService(
                store=self._store,
                verification_service=verification_service,
                ledger=self._ledger,
                treasury_account_id=self.config.operator_id,
                agent_proofs=agent_proofs,
                audit=audit,
                badge_token_id=self.config.badge_token_id,
            ),
            "claim_service": ClaimService(self._store, verification_service, audit),
            "query_service": MarketplaceQueryService(self._store),
        }
        self._started = True
        logger.info("✅ Service container setup completed")

    async def shutdown(self) -> None:
        """Flush audit messages and close adapters."""
        if not self._started:
            return
        await self.get("audit_logger").drain()
        await self._ai_factory.shutdown()
        if self._agent_registry is not None:
            await self._agent_registry.shutdown()
        await self._ledger.shutdown()
        self._started = False
        logger.info("👋 Service container shut down")

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Args:
            service_name: Name of the service

        Returns:
            Service instance

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    @property
    def ledger(self) -> LedgerProvider:
        return self._ledger

    @property
    def agent_registry_enabled(self) -> bool:
        return self._agent_registry is not None and self._agent_registry.is_enabled

    @property
    def ai_available(self) -> bool:
        return self._ai_provider is not None and self._ai_provider.is_available


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance.

    Returns:
        Service container instance configured from the environment
    """
    load_dotenv()
    return ServiceContainer()


# Convenience functions for FastAPI dependency injection
def get_settlement_service(
    container: ServiceContainer = Depends(get_service_container),
) -> SettlementService:
    """FastAPI dependency for the settlement service."""
    return container.get("settlement_service")


def get_claim_service(
    container: ServiceContainer = Depends(get_service_container),
) -> ClaimService:
    """FastAPI dependency for the claim service."""
    return container.get("claim_service")


def get_query_service(
    container: ServiceContainer = Depends(get_service_container),
) -> MarketplaceQueryService:
    """FastAPI dependency for the marketplace query service."""
    return container.get("query_service")
