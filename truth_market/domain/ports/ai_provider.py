"""Protocol for AI providers that classify claims."""

from typing import Protocol


class AIProvider(Protocol):
    """Protocol defining the interface for claim-classifying AI providers."""

    async def initialize(self) -> None:
        """Initialize the AI provider."""
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    async def classify_claim(self, claim_text: str) -> str:
        """Ask the model for a TRUE/FALSE verdict and return its raw reply.

        Raises on any network, authentication or empty-reply failure.
        """
        ...

    @property
    def provider_name(self) -> str:
        """Human-readable verifier tag recorded on claims."""
        ...

    @property
    def model(self) -> str:
        """Model identifier."""
        ...

    @property
    def is_available(self) -> bool:
        """Check if the provider is configured and ready."""
        ...
