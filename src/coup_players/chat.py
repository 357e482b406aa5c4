"""
Optional conversational replies for the heuristic player.

Chat is forwarded to an OpenAI-compatible chat completions endpoint. Without
an API key, or on any failure, the player simply stays silent.
"""
import asyncio
import logging
import os
import time
from typing import Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

PROVIDER_URLS = {
    "openai": "https://api.openai.com/v1/chat/completions",
    "groq": "https://api.groq.com/openai/v1/chat/completions",
}

PROVIDER_KEYS = {
    "openai": "OPENAI_API_KEY",
    "groq": "GROQ_API_KEY",
}

SYSTEM_PROMPT = (
    "You are {name}, a player in an online game of Coup chatting with another "
    "player. Reply casually in one or two short sentences. Never reveal or "
    "discuss which cards you hold."
)


class ChatResponder:
    """Async chat client with rate limiting and retries."""

    def __init__(
        self,
        provider: str = "openai",
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        requests_per_minute: int = 20,
        max_history: int = 20,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.provider = provider
        self.model = model
        self.api_key = api_key if api_key is not None else os.getenv(PROVIDER_KEYS.get(provider, ""), "")
        self.requests_per_minute = requests_per_minute
        self.max_history = max_history

        # Rate limiting
        self._request_times: List[float] = []
        self._lock = asyncio.Lock()

        self._client = client

    @property
    def available(self) -> bool:
        return bool(self.api_key) and self.provider in PROVIDER_URLS

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    async def _wait_for_rate_limit(self):
        """Wait if we're at rate limit."""
        async with self._lock:
            now = time.time()
            self._request_times = [t for t in self._request_times if now - t < 60]
            if len(self._request_times) >= self.requests_per_minute:
                wait_time = 60 - (now - self._request_times[0]) + 0.5
                if wait_time > 0:
                    logger.debug(f"Rate limit: waiting {wait_time:.1f}s")
                    await asyncio.sleep(wait_time)
            self._request_times.append(time.time())

    async def respond(self, name: str, message: str, history: List[str], retries: int = 2) -> Optional[str]:
        """
        Reply to a chat message, or None if no reply could be produced.

        Args:
            name: Our display name
            message: What the partner said
            history: Alternating partner/bot lines, oldest first
        """
        if not self.available:
            return None

        messages: List[Dict[str, str]] = [
            {"role": "system", "content": SYSTEM_PROMPT.format(name=name)}
        ]
        recent = history[-self.max_history:]
        # Partner and bot lines alternate, ending with the bot's last reply
        offset = len(recent) % 2
        for i, line in enumerate(recent):
            role = "user" if (i + offset) % 2 == 0 else "assistant"
            messages.append({"role": role, "content": line})
        messages.append({"role": "user", "content": message})

        client = self._ensure_client()
        for attempt in range(retries):
            try:
                await self._wait_for_rate_limit()
                response = await client.post(
                    PROVIDER_URLS[self.provider],
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json"
                    },
                    json={
                        "model": self.model,
                        "messages": messages,
                        "max_tokens": 80,
                        "temperature": 0.8
                    }
                )
                response.raise_for_status()
                data = response.json()
                reply = data["choices"][0]["message"]["content"].strip()
                return reply or None
            except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
                logger.warning(f"Chat request failed (attempt {attempt + 1}): {e}")
                if attempt < retries - 1:
                    await asyncio.sleep(2 ** attempt)
        return None

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
