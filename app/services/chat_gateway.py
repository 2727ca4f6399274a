import json
import logging
from typing import List, Optional

import httpx

from app.core.config import Settings
from app.core.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response generated"

_STATUS_HINTS = {
    401: "Invalid API key - please check your OPENROUTER_API_KEY",
    402: "Insufficient credits - please add credits to your OpenRouter account",
    429: "Rate limit exceeded - please try again later",
}


def hint_for_status(status_code: int) -> str:
    return _STATUS_HINTS.get(status_code, "OpenRouter API error")


def extract_content(payload) -> str:
    """First choice's text, or the placeholder when the payload is shaped unexpectedly."""
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return NO_RESPONSE
    return content if isinstance(content, str) and content else NO_RESPONSE


def _error_details(response: httpx.Response) -> str:
    text = response.text
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if data.get("message"):
            return data["message"]
    return text


class ChatGateway:
    """Single round trip to an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        max_tokens: int,
        temperature: float,
        referer: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.referer = referer
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ChatGateway":
        return cls(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            model=settings.chat_model,
            max_tokens=settings.chat_max_tokens,
            temperature=settings.chat_temperature,
            referer=settings.app_url,
            timeout=settings.chat_timeout_seconds,
            transport=transport,
        )

    def ensure_configured(self) -> None:
        if not self.api_key:
            logger.error("Chat API key is missing from the environment")
            raise ConfigurationError(
                "OpenRouter API key is not configured",
                hint="Set OPENROUTER_API_KEY in the server environment and restart",
            )

    async def complete(self, messages: List[dict], referer: Optional[str] = None) -> str:
        self.ensure_configured()

        body = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": referer or self.referer,
            "X-Title": "TaxSage - CA Advisor",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/chat/completions", json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Chat upstream request failed: %s", exc)
            raise UpstreamError(
                "Failed to get response from OpenRouter AI",
                details=str(exc),
                hint="Could not reach the chat provider - please try again later",
            ) from exc

        logger.info("Chat upstream responded with status %s", response.status_code)
        if response.is_error:
            details = _error_details(response)
            logger.error("Chat upstream error %s: %s", response.status_code, details)
            raise UpstreamError(
                "Failed to get response from OpenRouter AI",
                details=details,
                upstream_status=response.status_code,
                hint=hint_for_status(response.status_code),
            )

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Chat upstream returned a non-JSON body")
            return NO_RESPONSE
        return extract_content(payload)
