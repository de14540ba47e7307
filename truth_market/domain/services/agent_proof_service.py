"""Hard gate on the seller agent's on-chain registration."""

import logging
from typing import Any, Dict, Optional

from ..errors import AgentUnavailableError, LedgerError
from ..ports.agent_registry import AgentRegistry

logger = logging.getLogger(__name__)

TRUTH_AGENT_ID = "truth-agent"


class AgentProofService:
    """Look up the proof-of-registration of the truth agent.

    With no registry configured the gate is open and no proof is attached.
    With a registry, a failed lookup or an inactive agent blocks the sale.
    """

    def __init__(self, registry: Optional[AgentRegistry] = None, agent_id: str = TRUTH_AGENT_ID):
        self._registry = registry
        self.agent_id = agent_id

    @property
    def enabled(self) -> bool:
        return self._registry is not None and self._registry.is_enabled

    async def require_proof(self) -> Optional[Dict[str, Any]]:
        """Return the agent's proof blob, or None when no registry is configured.

        Raises:
            AgentUnavailableError: If the lookup fails or the agent is inactive
        """
        if not self.enabled:
            return None

        try:
            record = await self._registry.get_agent(self.agent_id)
        except LedgerError as e:
            logger.error(f"❌ Agent registry lookup failed for {self.agent_id}: {e}")
            raise AgentUnavailableError(self.agent_id, str(e)) from e

        if not record.active:
            logger.warning(f"⚠️ Agent {self.agent_id} is registered but inactive")
            raise AgentUnavailableError(self.agent_id, "agent is inactive")

        logger.info(f"🪪 Agent proof verified for {self.agent_id} (contract {record.contract_id})")
        return record.to_proof()
