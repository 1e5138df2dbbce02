"""OpenRouter LLM client — OpenAI-compatible chat completions."""

import logging

from openai import AsyncOpenAI

from ..config import OPENROUTER_API_KEY, PRICING_MODEL

logger = logging.getLogger(__name__)

_client = AsyncOpenAI(
    base_url="https://openrouter.ai/api/v1",
    api_key=OPENROUTER_API_KEY,
    timeout=120.0,
)

_EXTRA_HEADERS = {
    "HTTP-Referer": "https://parametric.furniture",
    "X-Title": "Parametric Furniture",
}


async def call_llm(
    messages: list[dict],
    model: str = PRICING_MODEL,
    system: str | None = None,
    temperature: float = 0.3,
) -> str:
    """Send a chat completion via OpenRouter. Returns the text content."""
    full_messages = list(messages)
    if system:
        full_messages.insert(0, {"role": "system", "content": system})

    resp = await _client.chat.completions.create(
        model=model,
        messages=full_messages,
        temperature=temperature,
        extra_headers=_EXTRA_HEADERS,
    )
    return resp.choices[0].message.content or ""
