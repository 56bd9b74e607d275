"""Thin OpenAI Chat Completions client over httpx.

Used by the AI insight, content generation and comment suggestion services.
No SDK: one POST to {OPENAI_BASE_URL}/chat/completions, content extracted from
choices[0].message.content.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from typing import Any

import httpx

from linkedin_growth.settings import get_settings

logger = logging.getLogger("uvicorn.error")

DEFAULT_TIMEOUT_SECONDS = 30.0


class OpenAIError(RuntimeError):
    """OpenAI is unconfigured or the request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def is_configured() -> bool:
    return bool(get_settings().openai_api_key)


def prompt_hash(*parts: str) -> str:
    h = hashlib.sha256()
    for p in parts:
        h.update(p.encode("utf-8"))
        h.update(b"\x00")
    return h.hexdigest()[:40]


def _extract_first_json_object(text: str) -> dict[str, Any] | None:
    """Best-effort extraction of the first JSON object from a string."""
    text = text.strip()
    if not text:
        return None
    # Fast path
    if text.startswith("{") and text.endswith("}"):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass
    # Best-effort: find the first {...} block
    m = re.search(r"\{[\s\S]*\}", text)
    if not m:
        return None
    try:
        return json.loads(m.group(0))
    except json.JSONDecodeError:
        return None


def extract_json_payload(text: str) -> dict[str, Any] | list[Any] | None:
    """Parse a JSON object or array out of model output (tolerates code fences)."""
    stripped = text.strip()
    if not stripped:
        return None
    try:
        parsed = json.loads(stripped)
        if isinstance(parsed, (dict, list)):
            return parsed
    except json.JSONDecodeError:
        pass
    obj = _extract_first_json_object(stripped)
    if obj is not None:
        return obj
    m = re.search(r"\[[\s\S]*\]", stripped)
    if not m:
        return None
    try:
        parsed = json.loads(m.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, list) else None


def extract_message_content(data: Any) -> str:
    """Extract from chat completions response: choices[0].message.content."""
    if isinstance(data, dict) and isinstance(data.get("choices"), list):
        for choice in data["choices"]:
            if isinstance(choice, dict):
                msg = choice.get("message")
                if isinstance(msg, dict) and isinstance(msg.get("content"), str):
                    return msg["content"]
    return ""


async def chat_completion(
    messages: list[dict[str, str]],
    *,
    model: str | None = None,
    max_tokens: int = 500,
    temperature: float = 0.7,
    json_mode: bool = False,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Run one chat completion and return the message content.

    Raises:
        OpenAIError: When no API key is configured or the request fails.
    """
    settings = get_settings()
    if not settings.openai_api_key:
        raise OpenAIError("OpenAI API key not configured")

    model = model or settings.openai_model_insights
    url = settings.openai_base_url.rstrip("/") + "/chat/completions"
    headers = {"Authorization": f"Bearer {settings.openai_api_key}", "Content-Type": "application/json"}
    body: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    if json_mode:
        body["response_format"] = {"type": "json_object"}

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            r = await client.post(url, headers=headers, json=body)
            r.raise_for_status()
            data = r.json()
    except httpx.HTTPStatusError as e:
        status = int(e.response.status_code) if e.response is not None else 0
        response_text = e.response.text[:500] if e.response is not None else ""
        logger.error(f"[openai] HTTP {status} url={url} model={model} response={response_text}")
        raise OpenAIError(f"OpenAI API error: {status}", status_code=status) from e
    except httpx.HTTPError as e:
        logger.error(f"[openai] request failed url={url} model={model}: {e!r}")
        raise OpenAIError("OpenAI API request failed") from e
    except ValueError as e:
        raise OpenAIError("OpenAI API returned invalid JSON") from e

    return extract_message_content(data)
