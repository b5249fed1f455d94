"""LLM service for Ollama-compatible chat endpoints."""

import json
import logging
from typing import Any

import httpx

from notecanvas.config import get_settings

logger = logging.getLogger(__name__)


class LLMService:
    """Service for interacting with the completion provider."""

    def __init__(self, api_key: str | None = None) -> None:
        self.settings = get_settings()
        self.base_url = self.settings.ollama_base_url
        self.model = self.settings.llm_model
        self.timeout = self.settings.llm_timeout_seconds
        self.api_key = api_key

    def _headers(self) -> dict[str, str]:
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        history: list[dict[str, str]] | None = None,
        images: list[str] | None = None,
        response_format: str | dict[str, Any] | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a response from the LLM.

        ``history`` holds prior turns as ``{"role": "user"|"assistant", "content": ...}``;
        ``images`` are base64 strings attached to the final user turn.
        """
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.extend(history or [])
        user_message: dict[str, Any] = {"role": "user", "content": prompt}
        if images:
            user_message["images"] = images
        messages.append(user_message)

        body: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }
        if response_format is not None:
            body["format"] = response_format

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/api/chat",
                json=body,
                headers=self._headers(),
            )
            response.raise_for_status()
            data = response.json()
            return data["message"]["content"]

    async def generate_json(
        self,
        prompt: str,
        system_prompt: str | None = None,
        schema: dict[str, Any] | None = None,
        temperature: float = 0.1,
    ) -> dict[str, Any]:
        """Generate structured JSON response from the LLM."""
        result = ""
        try:
            result = await self.generate(
                prompt=prompt,
                system_prompt=system_prompt,
                response_format=schema or "json",
                temperature=temperature,
            )
            return json.loads(strip_code_fences(result))
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse LLM response as JSON: {e}")
            logger.warning(f"Raw response: {result or 'N/A'}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling completion provider: {e}")
            raise


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around a JSON answer."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()
