"""Agent registry lookups through the ledger gateway."""

import logging
from typing import Optional

import httpx

from ...domain.errors import LedgerError, LedgerTimeoutError
from ...domain.ports.agent_registry import AgentRecord, AgentRegistry
from .hedera_gateway_adapter import LedgerGatewayConfig

logger = logging.getLogger(__name__)


class GatewayAgentRegistry(AgentRegistry):
    """Read-only view of the AgentRegistry contract.

    Calls the contract's ``getAgent(string)`` view through the gateway, which
    decodes the returned tuple into JSON.
    """

    def __init__(
        self,
        contract_id: Optional[str],
        config: Optional[LedgerGatewayConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._contract_id = contract_id
        self._config = config or LedgerGatewayConfig()
        self._client = client

    @property
    def is_enabled(self) -> bool:
        return bool(self._contract_id)

    async def get_agent(self, agent_id: str) -> AgentRecord:
        """Look up an agent registration.

        Raises:
            LedgerError: If the registry is disabled or the call fails
        """
        if not self.is_enabled:
            raise LedgerError("Agent registry contract not configured")

        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self._config.base_url, timeout=self._config.timeout)

        path = f"/contracts/{self._contract_id}/agents/{agent_id}"
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise LedgerTimeoutError(f"Agent lookup for {agent_id} timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise LedgerError(
                f"Agent lookup for {agent_id} failed: HTTP {e.response.status_code}",
                status=str(e.response.status_code),
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise LedgerError(f"Agent lookup for {agent_id} failed: {e}") from e

        return AgentRecord(
            agent_id=agent_id,
            contract_id=self._contract_id,
            agent_key=body.get("agentKey"),
            owner=body.get("owner"),
            role=body.get("role"),
            metadata_uri=body.get("metadataURI"),
            public_key_hash=body.get("publicKeyHash"),
            registered_at=int(body.get("registeredAt") or 0),
            active=bool(body.get("active")),
        )

    async def shutdown(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
