"""Thin wrapper around LLM providers (OpenAI / Azure / local-compatible)."""

from __future__ import annotations

import json
import logging
from typing import Any

from openai import AsyncAzureOpenAI, AsyncOpenAI
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import settings

logger = logging.getLogger("proofchain.llm")


def _build_client() -> tuple[AsyncOpenAI, str]:
    """Return (async_client, model_name) based on the configured provider."""
    provider = settings.llm_provider.lower()

    if provider == "azure":
        client = AsyncAzureOpenAI(
            azure_endpoint=settings.azure_openai_endpoint,
            api_key=settings.azure_openai_api_key,
            api_version="2024-12-01-preview",
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )
        model = settings.azure_openai_deployment
    elif provider == "local":
        client = AsyncOpenAI(
            base_url=settings.local_llm_base_url,
            api_key="not-needed",
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )
        model = settings.local_llm_model
    else:  # default: openai
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )
        model = settings.openai_model

    return client, model


_client, _model = _build_client()


class LLMError(Exception):
    """Raised when the model returns nothing usable."""


async def chat_completion(
    system_prompt: str,
    user_message: str,
    *,
    temperature: float | None = None,
    response_format: dict[str, Any] | None = None,
) -> str:
    """Send a chat-completion request and return the assistant's text reply.

    Parameters
    ----------
    system_prompt : str
        The system-level instruction.
    user_message : str
        The user-level content.
    temperature : float, optional
        Sampling temperature; defaults to ``settings.flow_temperature``.
    response_format : dict, optional
        If supplied, passed as ``response_format`` to the API (e.g. JSON mode).

    Returns
    -------
    str
        Raw text content of the assistant reply.
    """
    temp = temperature if temperature is not None else settings.flow_temperature

    kwargs: dict[str, Any] = {
        "model": _model,
        "temperature": temp,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ],
    }
    if response_format is not None:
        kwargs["response_format"] = response_format

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(1, settings.llm_max_attempts)),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type(Exception),
        reraise=True,
    ):
        with attempt:
            try:
                response = await _client.chat.completions.create(**kwargs)
            except Exception as exc:
                logger.exception("LLM call failed: %s", exc)
                raise
            content = response.choices[0].message.content
            if content is None:
                raise LLMError("LLM returned empty content.")
            return content.strip()

    raise LLMError("LLM call made no attempts.")


async def chat_completion_json(
    system_prompt: str,
    user_message: str,
    *,
    temperature: float | None = None,
) -> dict[str, Any]:
    """Like ``chat_completion`` but forces JSON output and parses it."""
    raw = await chat_completion(
        system_prompt,
        user_message,
        temperature=temperature,
        response_format={"type": "json_object"},
    )
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse LLM JSON: %s\nRaw: %s", exc, raw[:500])
        raise LLMError(f"LLM returned invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise LLMError(f"LLM returned a JSON {type(data).__name__}, expected an object.")
    return data
