"""Tests for the AI provider factory."""

import pytest

from truth_market.infrastructure.ai.factory import AIProviderFactory
from truth_market.infrastructure.ai.groq_adapter import GroqAdapter, GroqConfig


class TestProvider:
    """Test provider implementation."""

    __test__ = False

    def __init__(self, provider_name: str = "Test"):
        """Initialize test provider."""
        self._name = provider_name
        self._initialized = False

    async def initialize(self) -> None:
        self._initialized = True

    async def classify_claim(self, claim_text: str) -> str:
        return "TRUE"

    async def shutdown(self) -> None:
        self._initialized = False

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return "test"

    @property
    def is_available(self) -> bool:
        return self._initialized


@pytest.fixture
def ai_factory() -> AIProviderFactory:
    """Create an AI provider factory."""
    return AIProviderFactory()


@pytest.mark.asyncio
async def test_create_provider(ai_factory: AIProviderFactory):
    """Test provider creation and instance reuse."""
    ai_factory.register_provider("test", TestProvider)

    provider = await ai_factory.create_provider("test", provider_name="TestAI")

    assert provider.provider_name == "TestAI"
    assert provider.is_available
    assert ai_factory.get_provider("test") is provider
    assert await ai_factory.create_provider("test") is provider


@pytest.mark.asyncio
async def test_create_unknown_provider(ai_factory: AIProviderFactory):
    with pytest.raises(ValueError):
        await ai_factory.create_provider("unknown")


@pytest.mark.asyncio
async def test_try_create_groq_without_key(ai_factory: AIProviderFactory):
    """Test a missing key yields no provider instead of an error."""
    provider = await ai_factory.try_create_provider("groq", config=GroqConfig(api_key=""))

    assert provider is None
    assert ai_factory.available_providers == {"groq": False}


@pytest.mark.asyncio
async def test_create_groq_with_key(ai_factory: AIProviderFactory):
    provider = await ai_factory.create_provider("groq", config=GroqConfig(api_key="gsk_test_key"))

    assert isinstance(provider, GroqAdapter)
    assert ai_factory.available_providers == {"groq": True}
    await ai_factory.shutdown()
    assert ai_factory.get_provider("groq") is None


@pytest.mark.asyncio
async def test_shutdown(ai_factory: AIProviderFactory):
    """Test shutdown of all providers."""
    ai_factory.register_provider("test", TestProvider)
    provider = await ai_factory.create_provider("test")

    await ai_factory.shutdown()

    assert not provider.is_available
    assert ai_factory.get_provider("test") is None
