"""Adapter in front of the generation provider."""

import logging

from tutor_cache.entities import GenerationResult
from tutor_cache.errors import GenerationError
from tutor_cache.protocols import GenerationProvider

logger = logging.getLogger(__name__)


class GenerationAdapter:
    """Invokes the generation provider and normalizes its failures.

    Every provider exception (network error, rate limit, auth failure,
    malformed response) surfaces as ``GenerationError``. An empty
    completion is also an error: there is nothing to parse or cache.
    Parsing the text into a structured shape is the caller's job.
    """

    def __init__(self, provider: GenerationProvider) -> None:
        """Initialize the adapter.

        Args:
            provider: Generation provider (required).
        """
        self._provider = provider

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> GenerationResult:
        """Run one generation.

        Args:
            system_prompt: System instructions
            user_prompt: User message
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Maximum completion tokens

        Returns:
            The completion text with token usage

        Raises:
            GenerationError: If the provider fails or returns no text
        """
        try:
            result = await self._provider.complete(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"{self._provider.provider_name} generation failed: {e}") from e

        if not result.text or not result.text.strip():
            raise GenerationError(f"{self._provider.provider_name} returned an empty completion")

        logger.debug("Generated %d characters with %s (%d tokens)", len(result.text), result.model, result.tokens_used)
        return result

    async def is_available(self) -> bool:
        return await self._provider.is_available()

    @property
    def provider(self) -> GenerationProvider:
        """Get the underlying provider (for testing)."""
        return self._provider
