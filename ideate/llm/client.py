"""Async Claude client for consultant replies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import anthropic

from ideate.config import settings
from ideate.errors import GenerationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ideate.chat.models import ChatMessage

logger = logging.getLogger(__name__)

_client: anthropic.AsyncAnthropic | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client.

    Retries are disabled: a failed call degrades to fallback text instead.
    """
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.generation_timeout_seconds,
            max_retries=0,
        )
    return _client


def _acknowledgement() -> str:
    return (
        f"I understand my role as an AI consultant for {settings.company_name}. "
        "I will help users explore their ideas and pain points, and suggest "
        "AI-powered solutions."
    )


def build_messages(
    system_prompt: str,
    history: Sequence[ChatMessage],
    user_message: str,
) -> list[dict[str, Any]]:
    """Persona turn, acknowledgement, prior history, then the new user turn."""
    messages: list[dict[str, Any]] = [
        {"role": "user", "content": system_prompt},
        {"role": "assistant", "content": _acknowledgement()},
    ]
    for msg in history:
        role = "user" if msg.role == "user" else "assistant"
        messages.append({"role": role, "content": msg.content})
    messages.append({"role": "user", "content": user_message})
    return messages


async def complete_text(
    messages: list[dict[str, Any]],
    *,
    model: str | None = None,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> str:
    """Single-shot Claude call. Raises ``GenerationError`` on any failure."""
    client = _get_client()
    try:
        response = await client.messages.create(
            model=model or settings.chat_model,
            max_tokens=max_tokens or settings.generation_max_tokens,
            temperature=settings.generation_temperature if temperature is None else temperature,
            messages=messages,
        )
    except anthropic.APIError as exc:
        raise GenerationError(f"Generation failed: {exc}") from exc

    text = "".join(
        block.text for block in response.content if getattr(block, "type", "") == "text"
    )
    if not text.strip():
        raise GenerationError("Generation returned no text")
    return text


async def generate_reply(
    system_prompt: str,
    history: Sequence[ChatMessage],
    user_message: str,
) -> str:
    """Generate the consultant's reply to *user_message*."""
    messages = build_messages(system_prompt, history, user_message)
    logger.debug("Generating reply with %d message(s)", len(messages))
    return await complete_text(messages)
