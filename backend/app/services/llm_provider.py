"""
LLM Provider abstraction for fitting breakdowns.

Supports:
- OpenAI (cloud chat completions)
- Ollama (local, free)
- None (breakdowns disabled)
"""

import json
import logging
import re
from typing import Any, Optional
from abc import ABC, abstractmethod

import httpx

from app.core.config import settings
from app.core.retry import RetryableStatusError, create_retry_decorator, should_retry_status

logger = logging.getLogger(__name__)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name: str = "none"
    model: str = ""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        max_tokens: int = 1600,
        system: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        """Generate text from prompt. Returns an empty string on failure."""
        pass


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider."""

    name = "openai"
    DEFAULT_MODEL = "gpt-4o"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, url: Optional[str] = None):
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL or self.DEFAULT_MODEL
        self.url = url or settings.OPENAI_URL

        if not self.api_key:
            raise ValueError("OPENAI_API_KEY not set")

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 1600,
        system: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": 0.7,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            result = await self._post(payload)
        except (httpx.HTTPError, RetryableStatusError) as e:
            logger.error(f"OpenAI request failed: {e}")
            return ""

        choices = result.get("choices") or []
        if not choices:
            logger.error("OpenAI returned no choices")
            return ""
        return choices[0].get("message", {}).get("content") or ""

    @create_retry_decorator(max_attempts=3)
    async def _post(self, payload: dict) -> dict:
        async with httpx.AsyncClient(timeout=90.0) as client:
            response = await client.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )

        if should_retry_status(response.status_code):
            raise RetryableStatusError(response.status_code, response.text)

        response.raise_for_status()
        return response.json()


class OllamaProvider(LLMProvider):
    """Local Ollama provider."""

    name = "ollama"

    def __init__(self, model: Optional[str] = None, url: Optional[str] = None):
        self.model = model or settings.OLLAMA_MODEL
        self.url = url or settings.OLLAMA_URL

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 1600,
        system: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        """Call Ollama API."""
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "num_predict": max_tokens,
                "temperature": 0.7,
            },
        }
        if system:
            payload["system"] = system
        if json_mode:
            payload["format"] = "json"

        async with httpx.AsyncClient(timeout=120.0) as client:
            try:
                response = await client.post(self.url, json=payload)

                if response.status_code != 200:
                    logger.error(f"Ollama error: {response.status_code}")
                    return ""

                return response.json().get("response", "")

            except httpx.RequestError as e:
                logger.error(f"Ollama request failed: {e}")
                return ""


class NoOpProvider(LLMProvider):
    """Disabled LLM provider - returns empty string."""

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 1600,
        system: Optional[str] = None,
        json_mode: bool = False,
    ) -> str:
        return ""


def get_llm_provider() -> LLMProvider:
    """Factory function to get the configured LLM provider."""
    provider_name = (settings.LLM_PROVIDER or "none").lower()

    if provider_name == "openai":
        try:
            return OpenAIProvider()
        except ValueError as e:
            logger.warning(f"OpenAI not configured: {e}, falling back to none")
            return NoOpProvider()

    elif provider_name == "ollama":
        return OllamaProvider()

    else:
        return NoOpProvider()


def extract_json_from_response(text: str) -> Optional[Any]:
    """Extract a JSON object or array from an LLM response."""
    if not text:
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    patterns = [
        r'```json\s*(.*?)\s*```',
        r'```\s*(.*?)\s*```',
        r'(\{[\s\S]*\})',
        r'(\[[\s\S]*\])',
    ]

    for pattern in patterns:
        match = re.search(pattern, text, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(1))
            except json.JSONDecodeError:
                continue

    return None
