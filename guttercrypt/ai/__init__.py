"""Assistant module for guttercrypt.

Answers secrets-management questions through Gemini or a local Ollama
server, using the encrypted memory as context.
"""

from .assistant import (
    SYSTEM_PROMPT,
    Assistant,
    AskOutcome,
    ask_with_memory,
)
from .client import (
    API_ERROR,
    AUTH_FAILED,
    NETWORK_ERROR,
    NO_API_KEY,
    NO_PROVIDER,
    AIResponse,
    GeminiClient,
    OllamaClient,
)

__all__ = [
    "Assistant",
    "AskOutcome",
    "ask_with_memory",
    "SYSTEM_PROMPT",
    "AIResponse",
    "GeminiClient",
    "OllamaClient",
    # Error codes
    "NO_PROVIDER",
    "NO_API_KEY",
    "AUTH_FAILED",
    "NETWORK_ERROR",
    "API_ERROR",
]
