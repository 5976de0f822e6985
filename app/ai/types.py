from typing import Protocol


class AIClient(Protocol):
    """Free-text completion service. No structure is promised for the reply."""

    async def generate(self, prompt: str) -> str: ...
