from typing import Any, Dict, List, Optional
import logging

import httpx

from ..core.errors import ChatModelError, ConfigurationError

logger = logging.getLogger("chatbot.llm")


class ChatModelClient:
    """Thin async client for the OpenAI chat completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.0,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.url = f"{base_url.rstrip('/')}/chat/completions"
        self.timeout = timeout
        self._transport = transport

    async def chat(self, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Returns the raw message dict from OpenAI, e.g.:
        {
            "role": "assistant",
            "content": "..."
        }
        """
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured.")

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    self.url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Chat completion failed (%s): %s", type(exc).__name__, exc)
            raise ChatModelError(f"Chat completion failed: {type(exc).__name__}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("Chat completion endpoint returned a non-JSON body")
            raise ChatModelError("Chat completion response is not valid JSON.") from exc

        try:
            return data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ChatModelError("Chat completion response missing choices[0].message.") from exc

    async def complete(self, prompt: str) -> str:
        """Send `prompt` as a single user message and return the reply text."""
        message = await self.chat([{"role": "user", "content": prompt}])
        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ChatModelError("Chat completion content is not a string.")
        return content
