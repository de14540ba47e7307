"""Best-effort audit trail on a consensus topic, decoupled from request results."""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from ..errors import LedgerError
from ..ports.ledger_provider import LedgerProvider

logger = logging.getLogger(__name__)


class AuditLogger:
    """Publish audit messages from detached tasks with exponential backoff.

    Publishing never raises and never delays the caller; failed deliveries
    are logged after the last attempt.
    """

    def __init__(
        self,
        ledger: LedgerProvider,
        topic_id: Optional[str],
        max_attempts: int = 3,
        base_backoff: float = 0.5,
    ):
        self._ledger = ledger
        self._topic_id = topic_id
        self._max_attempts = max_attempts
        self._base_backoff = base_backoff
        self._pending: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(self._topic_id)

    def publish(self, payload: Dict[str, Any]) -> Optional[asyncio.Task]:
        """Schedule delivery of one message and return its task."""
        if not self.enabled:
            logger.debug(f"Audit topic not configured, skipping {payload.get('type')}")
            return None

        task = asyncio.create_task(self._deliver(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, payload: Dict[str, Any]) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            try:
                receipt = await self._ledger.submit_message(self._topic_id, payload)
                logger.info(f"📜 Audit message {payload.get('type')} recorded: {receipt.transaction_id}")
                return True
            except LedgerError as e:
                if attempt == self._max_attempts:
                    logger.error(f"⚠️ Audit submission failed after {attempt} attempts: {e}")
                    return False
                backoff = self._base_backoff * (2 ** (attempt - 1))
                logger.warning(f"⚠️ Audit submission failed (attempt {attempt}/{self._max_attempts}), retrying in {backoff}s")
                await asyncio.sleep(backoff)
        return False

    async def drain(self) -> None:
        """Wait for every in-flight message."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
