"""Tests for environment configuration."""

from truth_market.infrastructure.config import MarketConfig


def test_from_env(monkeypatch):
    """Test values are read from the environment."""
    monkeypatch.setenv("OPERATOR_ID", "0.0.5000")
    monkeypatch.setenv("BADGE_TOKEN_ID", "0.0.7777")
    monkeypatch.setenv("TOPIC_ID", "0.0.9999")
    monkeypatch.setenv("UNKNOWN_CLAIM_POLICY", "uncertain")
    monkeypatch.delenv("AGENT_REGISTRY_CONTRACT", raising=False)

    config = MarketConfig.from_env()

    assert config.operator_id == "0.0.5000"
    assert config.badge_token_id == "0.0.7777"
    assert config.topic_id == "0.0.9999"
    assert config.unknown_claim_policy == "uncertain"
    assert config.agent_registry_contract is None
    assert config.truth_agent_id == "truth-agent"


def test_placeholder_values_are_unset(monkeypatch):
    """Test template values from an example .env are ignored."""
    monkeypatch.setenv("BADGE_TOKEN_ID", "your-badge-token-id")
    monkeypatch.setenv("TOPIC_ID", "  ")

    config = MarketConfig.from_env()

    assert config.badge_token_id is None
    assert config.topic_id is None
