"""Secrets-management assistant backed by Gemini or Ollama.

The assistant receives the memory context as extra system prompt and
knows nothing about where its answers are stored.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from ..config.project import ProjectConfig
from ..config.settings import AIConfig
from ..memory import MemoryStore, build_prompt_context
from ..utils.logging import get_logger
from ..vault.crypto import Passphrase
from ..vault.exceptions import VaultError
from .client import NO_API_KEY, NO_PROVIDER, AIResponse, GeminiClient, OllamaClient

logger = get_logger(__name__)

PROVIDERS = ("gemini", "ollama")
DEFAULT_PROVIDER = "gemini"

SYSTEM_PROMPT = """You are KatBot, a sarcastic punk cat who is also a CLI secrets management expert.
You help developers with .env files, encryption, secrets management, and security best practices.
Your personality: snarky, blunt, uses cat puns, but genuinely helpful underneath the attitude.
Keep responses concise and practical. Use occasional emoji. Never reveal actual secret values.
You speak in lowercase mostly, like you can't be bothered with shift keys."""


class Assistant:
    """Routes questions to the configured provider."""

    def __init__(
        self,
        config: Optional[AIConfig] = None,
        project_config: Optional[ProjectConfig] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the assistant.

        Args:
            config: AI settings (provider default, endpoints, timeout)
            project_config: Local config (provider choice, API key)
            client: Preconfigured httpx client (for tests)
        """
        self.config = config or AIConfig()
        self.project_config = project_config or ProjectConfig()
        self._client = client

    @property
    def provider(self) -> str:
        """Selected provider name (local config wins over settings)."""
        provider = self.project_config.ai_provider or self.config.provider or DEFAULT_PROVIDER
        return provider.lower()

    @property
    def gemini_api_key(self) -> Optional[str]:
        return self.config.gemini.api_key or self.project_config.api_key

    def ask(self, question: str, memory_context: str = "") -> AIResponse:
        """
        Ask a question.

        Args:
            question: User question
            memory_context: Output of build_prompt_context

        Returns:
            AIResponse (failures carry an error code)
        """
        provider = self.provider
        system = SYSTEM_PROMPT + memory_context if memory_context else SYSTEM_PROMPT

        if provider == "gemini":
            api_key = self.gemini_api_key
            if not api_key:
                return AIResponse.failure(NO_API_KEY, provider=provider)
            client = GeminiClient(
                api_key,
                self.config.gemini,
                timeout=self.config.timeout,
                client=self._client,
            )
        elif provider == "ollama":
            client = OllamaClient(
                self.config.ollama,
                timeout=self.config.timeout,
                client=self._client,
            )
        else:
            return AIResponse.failure(NO_PROVIDER, f"Unknown provider: {provider}")

        logger.debug("Asking %s", provider)
        try:
            return client.generate(question, system=system)
        finally:
            client.close()


@dataclass
class AskOutcome:
    """Result of a question asked with memory.

    memory_warning is set when the answer could not be recorded; the
    answer itself is still valid.
    """

    response: AIResponse
    memory_warning: Optional[str] = None


def ask_with_memory(
    assistant: Assistant,
    question: str,
    memory_store: Optional[MemoryStore] = None,
    passphrase: Optional[Passphrase] = None,
) -> AskOutcome:
    """
    Ask with memory context and record the exchange.

    Memory is skipped entirely when no store or passphrase is given.

    Raises:
        WrongPassphraseError: If memory exists but cannot be decrypted
    """
    use_memory = memory_store is not None and passphrase is not None

    context = ""
    if use_memory:
        context = build_prompt_context(memory_store.load(passphrase))

    response = assistant.ask(question, context)
    if not response.success or not use_memory:
        return AskOutcome(response=response)

    try:
        memory_store.add_conversation(question, response.text, passphrase)
    except (VaultError, OSError) as e:
        logger.warning("Could not record conversation: %s", e)
        return AskOutcome(response=response, memory_warning=f"Conversation not saved: {e}")

    return AskOutcome(response=response)
