"""Chat completion helpers for the OpenAI-compatible LLM endpoint."""

import asyncio
import json
import re
from typing import Any, Optional

import structlog
from openai import AsyncOpenAI

from stylescout.config.settings import settings

logger = structlog.get_logger()


class LLMResponseError(Exception):
    """The LLM replied with something we cannot use."""


_llm_client: Optional[AsyncOpenAI] = None


def get_llm_client() -> Optional[AsyncOpenAI]:
    """Get the shared LLM client.

    Returns:
        AsyncOpenAI pointed at the configured endpoint, or None when no
        usable API key is set (callers then take their rule-based path)
    """
    global _llm_client
    if not settings.llm_enabled:
        return None
    if _llm_client is None:
        # Failures go straight to the caller's fallback, so the SDK must not retry
        _llm_client = AsyncOpenAI(
            api_key=settings.groq_api_key,
            base_url=settings.llm_base_url,
            max_retries=0,
        )
    return _llm_client


def reset_llm_client() -> None:
    """Drop the shared client (for testing)."""
    global _llm_client
    _llm_client = None


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence from model output."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r'^```(?:json)?\n?', '', text)
        text = re.sub(r'\n?```$', '', text)
    return text


async def complete_text(
    client: AsyncOpenAI,
    model: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float,
    max_tokens: Optional[int] = None,
    json_mode: bool = False,
    timeout: Optional[float] = None,
) -> str:
    """Run one system/user chat completion and return the reply text.

    Raises:
        asyncio.TimeoutError: The call exceeded the timeout
        LLMResponseError: The reply had no content
    """
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
    }
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = await asyncio.wait_for(
        client.chat.completions.create(**kwargs),
        timeout=timeout or settings.llm_timeout_seconds,
    )

    if not response.choices:
        raise LLMResponseError("Empty completion")
    content = response.choices[0].message.content
    if not content or not content.strip():
        raise LLMResponseError("Empty completion content")
    return content.strip()


async def complete_json(
    client: AsyncOpenAI,
    model: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float,
    max_tokens: Optional[int] = None,
    timeout: Optional[float] = None,
) -> Any:
    """Run a JSON-mode chat completion and decode the reply.

    Raises:
        asyncio.TimeoutError: The call exceeded the timeout
        LLMResponseError: The reply was empty or not valid JSON
    """
    text = await complete_text(
        client,
        model,
        system_prompt,
        user_prompt,
        temperature=temperature,
        max_tokens=max_tokens,
        json_mode=True,
        timeout=timeout,
    )
    try:
        return json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"Invalid JSON from model: {e}") from e
