"""Prompt context built from memory for the assistant."""

from .models import Memory

NOTES_HEADER = "--- USER NOTES (things the user wants you to remember) ---"
HISTORY_HEADER = "--- RECENT CONVERSATION HISTORY ---"


def build_prompt_context(memory: Memory) -> str:
    """
    Format notes and conversation history as extra system context.

    Args:
        memory: Loaded memory

    Returns:
        Context block, or an empty string if memory is empty
    """
    prompt = ""

    if memory.notes:
        prompt += f"\n\n{NOTES_HEADER}\n"
        for i, note in enumerate(memory.notes, 1):
            prompt += f"{i}. {note.text}\n"

    if memory.conversations:
        prompt += f"\n\n{HISTORY_HEADER}\n"
        for exchange in memory.conversations:
            prompt += f"Q: {exchange.question}\nA: {exchange.answer}\n\n"

    return prompt
