"""HTTP clients for the assistant's language model providers.

Wraps the Gemini REST API and a local Ollama server behind one small
interface. Failures come back as typed responses, never as exceptions.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from ..config.settings import GeminiConfig, OllamaConfig
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Error codes
NO_PROVIDER = "no_provider"
NO_API_KEY = "no_api_key"
AUTH_FAILED = "auth_failed"
NETWORK_ERROR = "network_error"
API_ERROR = "api_error"


@dataclass
class AIResponse:
    """Response from a provider."""

    text: str = ""
    provider: Optional[str] = None
    success: bool = True
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def failure(cls, error: str, message: Optional[str] = None, provider: Optional[str] = None) -> "AIResponse":
        return cls(provider=provider, success=False, error=error, message=message)


def _status_failure(response: httpx.Response, provider: str) -> AIResponse:
    if response.status_code in (401, 403):
        return AIResponse.failure(AUTH_FAILED, f"HTTP {response.status_code}", provider)
    return AIResponse.failure(
        API_ERROR,
        f"HTTP {response.status_code}: {response.text[:200]}",
        provider,
    )


class GeminiClient:
    """Client for the Gemini generateContent endpoint."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        config: Optional[GeminiConfig] = None,
        timeout: int = 60,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key
            config: Endpoint and model settings
            timeout: Request timeout in seconds
            client: Preconfigured httpx client (for tests)
        """
        self.api_key = api_key
        self.config = config or GeminiConfig()
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def generate(self, prompt: str, system: Optional[str] = None) -> AIResponse:
        """
        Generate a response.

        Args:
            prompt: User question
            system: System instruction

        Returns:
            AIResponse with generated text
        """
        url = f"{self.config.base_url}/models/{self.config.model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        try:
            response = self._client.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            return AIResponse.failure(NETWORK_ERROR, "Request timed out.", self.name)
        except httpx.HTTPError as e:
            return AIResponse.failure(NETWORK_ERROR, str(e), self.name)

        if response.status_code != 200:
            return _status_failure(response, self.name)

        try:
            data = response.json()
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            return AIResponse.failure(API_ERROR, f"Unexpected response: {e}", self.name)

        return AIResponse(text=text.strip(), provider=self.name)


class OllamaClient:
    """Client for a local Ollama server."""

    name = "ollama"

    def __init__(
        self,
        config: Optional[OllamaConfig] = None,
        timeout: int = 60,
        client: Optional[httpx.Client] = None,
    ):
        self.config = config or OllamaConfig()
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def generate(self, prompt: str, system: Optional[str] = None) -> AIResponse:
        """Generate a response from Ollama."""
        payload = {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
        }
        if system:
            payload["system"] = system

        try:
            response = self._client.post(
                f"{self.config.base_url}/api/generate",
                json=payload,
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            return AIResponse.failure(
                NETWORK_ERROR, "Request timed out. Ollama may be overloaded.", self.name
            )
        except httpx.HTTPError as e:
            return AIResponse.failure(NETWORK_ERROR, str(e), self.name)

        if response.status_code != 200:
            return _status_failure(response, self.name)

        try:
            data = response.json()
        except ValueError as e:
            return AIResponse.failure(API_ERROR, f"Unexpected response: {e}", self.name)

        return AIResponse(text=data.get("response", "").strip(), provider=self.name)
