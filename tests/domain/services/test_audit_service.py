"""Tests for the best-effort audit logger."""

import pytest

from truth_market.domain.services.audit_service import AuditLogger


@pytest.mark.asyncio
async def test_publish_delivers_message(ledger):
    """Test a message reaches the configured topic."""
    audit = AuditLogger(ledger, "0.0.9999")

    task = audit.publish({"type": "ClaimPurchase", "saleId": "sale_1"})
    await audit.drain()

    assert task is not None
    assert await task is True
    assert ledger.messages == [{"topic": "0.0.9999", "payload": {"type": "ClaimPurchase", "saleId": "sale_1"}}]


@pytest.mark.asyncio
async def test_publish_retries_with_backoff(ledger, monkeypatch):
    """Test transient failures are retried with doubling delays."""
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr("truth_market.domain.services.audit_service.asyncio.sleep", fake_sleep)
    ledger.message_failures = 2
    audit = AuditLogger(ledger, "0.0.9999", max_attempts=3, base_backoff=0.5)

    task = audit.publish({"type": "ClaimVerification"})

    assert await task is True
    assert delays == [0.5, 1.0]
    assert len(ledger.messages) == 1


@pytest.mark.asyncio
async def test_publish_gives_up_silently(ledger):
    """Test exhausted retries are logged, never raised."""
    ledger.message_failures = 5
    audit = AuditLogger(ledger, "0.0.9999", max_attempts=2, base_backoff=0)

    task = audit.publish({"type": "ClaimPurchase"})

    assert await task is False
    assert ledger.messages == []


@pytest.mark.asyncio
async def test_publish_without_topic_is_noop(ledger):
    """Test nothing is scheduled when no topic is configured."""
    audit = AuditLogger(ledger, None)

    assert audit.enabled is False
    assert audit.publish({"type": "ClaimPurchase"}) is None
    await audit.drain()
    assert ledger.messages == []
