"""OpenAI chat completions generation provider.

Uses the official openai SDK (``AsyncOpenAI``). Any OpenAI-compatible
endpoint works through ``OPENAI_BASE_URL``.
"""

import logging

import openai

from tutor_cache.config import settings
from tutor_cache.entities import GenerationResult

logger = logging.getLogger(__name__)


class OpenAIGenerationProvider:
    """OpenAI implementation of the GenerationProvider protocol.

    This class satisfies the GenerationProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = OpenAIGenerationProvider.create()
        result = await provider.complete(
            system_prompt="You are a tutor.",
            user_prompt="Explain fractions.",
            model="gpt-4o-mini",
            temperature=0.7,
            max_tokens=500,
        )
        print(result.text, result.tokens_used)
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        """Initialize the OpenAI provider.

        Args:
            api_key: API key. Defaults to settings.openai_api_key.
            base_url: Alternative API base URL. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.llm_timeout.
            client: Preconfigured SDK client (for testing).
        """
        self._api_key = api_key or settings.openai_api_key or ""
        self._base_url = base_url or settings.openai_base_url
        self._timeout = timeout or settings.llm_timeout
        self._client = client

        if not self._api_key:
            logger.warning("OPENAI_API_KEY is not set; generation calls will fail and fall back")

    @classmethod
    def create(cls, api_key: str | None = None, base_url: str | None = None) -> "OpenAIGenerationProvider":
        """Factory method to create OpenAIGenerationProvider with defaults.

        Args:
            api_key: API key. If None, uses settings.
            base_url: API base URL. If None, uses settings.

        Returns:
            Configured OpenAIGenerationProvider
        """
        return cls(api_key=api_key, base_url=base_url)

    @property
    def client(self) -> openai.AsyncOpenAI:
        """Lazy-load the async OpenAI client."""
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client

    @property
    def provider_name(self) -> str:
        return "openai"

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> GenerationResult:
        """Run one chat completion.

        Raises:
            RuntimeError: If the API key is missing
            openai.OpenAIError: If the API call fails
        """
        if not self._api_key:
            raise RuntimeError("OpenAI is not configured: set OPENAI_API_KEY")

        completion = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

        text = completion.choices[0].message.content if completion.choices else None
        usage = completion.usage
        return GenerationResult(
            text=text or "",
            tokens_used=usage.total_tokens if usage else 0,
            model=completion.model or model,
        )

    async def is_available(self) -> bool:
        """Check that the API key is accepted by listing models."""
        if not self._api_key:
            return False
        try:
            await self.client.models.list()
            return True
        except openai.OpenAIError:
            return False

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
