from __future__ import annotations

import os
from typing import Optional

import google.generativeai as genai


class GeminiProvider:
    def __init__(self, model: str, api_key: Optional[str] = None):
        self._model_name = model
        self._api_key = api_key
        self._model = None

    def _get_model(self):
        # Built on first use so a missing key surfaces as a generation failure.
        if self._model is None:
            key = (self._api_key or os.getenv("GEMINI_API_KEY") or "").strip()
            if not key:
                raise RuntimeError("GEMINI_API_KEY is missing")
            genai.configure(api_key=key)
            self._model = genai.GenerativeModel(model_name=self._model_name)
        return self._model

    async def generate(self, prompt: str) -> str:
        response = await self._get_model().generate_content_async(prompt)
        return response.text or ""
