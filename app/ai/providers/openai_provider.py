from __future__ import annotations

import os
from typing import Optional

from openai import AsyncOpenAI


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        max_retries: int = 0,
        temperature: float = 0.7,
    ):
        self._model = model
        self._temperature = temperature
        self._api_key = api_key
        self._base_url = base_url
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        # Built on first use so a missing key surfaces as a generation failure.
        if self._client is None:
            key = (self._api_key or os.getenv("OPENAI_API_KEY") or "").strip()
            if not key:
                raise RuntimeError("OPENAI_API_KEY is missing")

            # Retries stay off by default: a failed generation falls back to static content.
            self._client = AsyncOpenAI(
                api_key=key,
                base_url=(self._base_url or os.getenv("OPENAI_BASE_URL") or None),
                timeout=float(os.getenv("OPENAI_TIMEOUT_S", str(self._timeout_s))),
                max_retries=int(os.getenv("OPENAI_MAX_RETRIES", str(self._max_retries))),
            )
        return self._client

    async def generate(self, prompt: str) -> str:
        response = await self._get_client().chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self._temperature,
        )
        content = response.choices[0].message.content if response.choices else ""
        return content or ""
