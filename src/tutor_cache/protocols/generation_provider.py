"""Generation provider protocol.

Defines the interface for any text generation service (large language
model completions). The service is a black box: prompt in, text and token
count out, or an exception.

Implementations can include:
- OpenAI chat completions (default)
- Ollama served locally
- Any OpenAI-compatible endpoint
"""

from typing import Protocol, runtime_checkable

from tutor_cache.entities import GenerationResult


@runtime_checkable
class GenerationProvider(Protocol):
    """Protocol for generation services.

    Example:
        ```python
        from tutor_cache.protocols import GenerationProvider

        provider: GenerationProvider = OpenAIGenerationProvider.create()
        provider: GenerationProvider = OllamaGenerationProvider.create()
        ```
    """

    @property
    def provider_name(self) -> str:
        """Return the provider identifier (e.g. "openai")."""
        ...

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> GenerationResult:
        """Run one completion.

        Args:
            system_prompt: System instructions
            user_prompt: The user message
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Maximum completion tokens

        Returns:
            The completion text with token usage
        """
        ...

    async def is_available(self) -> bool:
        """Check if the provider is reachable and configured.

        Returns:
            True if available, False otherwise
        """
        ...
