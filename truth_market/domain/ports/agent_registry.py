"""Port interface for the on-chain seller-agent registry."""

from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel


class AgentRecord(BaseModel):
    """Registration of an agent identity in the registry contract."""

    agent_id: str
    contract_id: str
    owner: Optional[str] = None
    role: Optional[str] = None
    metadata_uri: Optional[str] = None
    public_key_hash: Optional[str] = None
    registered_at: int = 0
    active: bool = False
    agent_key: Optional[str] = None

    def to_proof(self) -> Dict[str, Any]:
        """Proof blob attached to sales."""
        return {
            "agentId": self.agent_id,
            "agentKey": self.agent_key,
            "contractId": self.contract_id,
            "metadataURI": self.metadata_uri,
            "registeredAt": self.registered_at,
            "active": self.active,
        }


class AgentRegistry(Protocol):
    """Read-only access to the agent registry."""

    @property
    def is_enabled(self) -> bool:
        """Whether a registry contract is configured."""
        ...

    async def get_agent(self, agent_id: str) -> AgentRecord:
        """Look up an agent; raises ``LedgerError`` when the lookup fails."""
        ...

    async def shutdown(self) -> None:
        """Close network resources."""
        ...
