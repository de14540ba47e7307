"""Groq (OpenAI-compatible) implementation of the AI provider interface."""

import logging
import os
from typing import Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from ...domain.ports.ai_provider import AIProvider

logger = logging.getLogger(__name__)

VERIFICATION_PROMPT = """Analyze this claim and respond with either TRUE or FALSE followed by a brief explanation.

Claim: "{claim}"

Format your response exactly like this:
TRUE - [your explanation]
OR
FALSE - [your explanation]"""


class GroqConfig(BaseModel):
    """Configuration for the Groq adapter."""

    api_key: str = Field(default="", description="Groq API key")
    model: str = Field(default="llama-3.3-70b-versatile", description="Model to use")
    base_url: str = Field(default="https://api.groq.com/openai/v1", description="OpenAI-compatible endpoint")
    temperature: float = Field(default=0.3, description="Temperature for responses")
    max_tokens: int = Field(default=256, description="Maximum tokens per response")
    timeout: float = Field(default=15.0, description="API timeout in seconds")

    @classmethod
    def from_env(cls) -> "GroqConfig":
        """Create configuration from environment variables."""
        return cls(
            api_key=os.getenv("GROQ_API_KEY") or os.getenv("GROK_API_KEY") or "",
            model=os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile"),
            base_url=os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1"),
            timeout=float(os.getenv("AI_TIMEOUT", "15")),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key) and "your-" not in self.api_key


class GroqAdapter(AIProvider):
    """Claim classifier backed by a Groq-hosted Llama model."""

    def __init__(
        self,
        config: Optional[GroqConfig] = None,
    ):
        """Initialize the adapter."""
        self._config = config or GroqConfig()
        self._client: Optional[AsyncOpenAI] = None
        self._initialized = False

    async def initialize(self) -> None:
        """Create the API client.

        Raises:
            ConnectionError: If no usable API key is configured
        """
        if not self._config.has_credentials:
            self._initialized = False
            raise ConnectionError("Failed to initialize Groq provider: no API key configured")

        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                max_retries=0,
            )
        self._initialized = True
        logger.info(f"✅ Groq provider ready ({self._config.model})")

    async def classify_claim(self, claim_text: str) -> str:
        """Ask the model for a TRUE/FALSE verdict and return the raw reply."""
        if not self._client:
            raise RuntimeError("Provider not initialized")

        response = await self._client.chat.completions.create(
            model=self._config.model,
            messages=[{"role": "user", "content": VERIFICATION_PROMPT.format(claim=claim_text)}],
            max_tokens=self._config.max_tokens,
            temperature=self._config.temperature,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise ValueError("No content in AI response")
        return content.strip()

    async def shutdown(self) -> None:
        """Clean up resources and shut down the provider."""
        if self._client:
            await self._client.close()
            self._client = None
        self._initialized = False

    @property
    def provider_name(self) -> str:
        """Verifier tag recorded on claims."""
        return f"GROQ AI ({self._config.model})"

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def is_available(self) -> bool:
        """Check if the provider is available and ready."""
        return self._initialized and self._client is not None
