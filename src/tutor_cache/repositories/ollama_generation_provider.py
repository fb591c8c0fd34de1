"""Ollama-based generation provider.

Uses Ollama's local chat API to generate completions. Useful for
development without an OpenAI key.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull llama3.1`
    - Ollama running: `ollama serve` (usually runs automatically)
"""

import httpx

from tutor_cache.config import settings
from tutor_cache.entities import GenerationResult


class OllamaGenerationProvider:
    """Ollama implementation of the GenerationProvider protocol.

    This class satisfies the GenerationProvider protocol through structural
    typing - no explicit inheritance needed.

    The API endpoint is http://localhost:11434/api/chat by default. The
    ``model`` argument of ``complete`` is passed through unchanged, so the
    configured model names must exist in Ollama.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama generation provider.

        Args:
            base_url: Ollama API base URL. Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds. Defaults to settings.llm_timeout.
            client: Preconfigured HTTP client (for testing).
        """
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._timeout = timeout or settings.llm_timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(cls, base_url: str | None = None) -> "OllamaGenerationProvider":
        """Factory method to create OllamaGenerationProvider with defaults.

        Args:
            base_url: Ollama API URL. If None, uses settings.

        Returns:
            Configured OllamaGenerationProvider
        """
        return cls(base_url=base_url)

    @property
    def provider_name(self) -> str:
        return "ollama"

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
            RuntimeError: If the Ollama API request fails
            ValueError: If the response format is invalid
        """
        url = f"{self._base_url}/api/chat"
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            error_msg = f"Ollama API error: {e}"
            if "connection refused" in str(e).lower():
                error_msg += "\n  → Is Ollama running? Try: ollama serve"
            elif "not found" in str(e).lower():
                error_msg += f"\n  → Model not found. Try: ollama pull {model}"
            raise RuntimeError(error_msg) from e

        message = data.get("message")
        if not isinstance(message, dict) or "content" not in message:
            raise ValueError(f"Unexpected response format: {data}")

        return GenerationResult(
            text=message["content"] or "",
            tokens_used=int(data.get("prompt_eval_count", 0)) + int(data.get("eval_count", 0)),
            model=data.get("model", model),
        )

    async def is_available(self) -> bool:
        """Check if Ollama is running.

        Returns:
            True if the tags endpoint answers, False otherwise
        """
        try:
            response = await self.client.get(f"{self._base_url}/api/tags")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
