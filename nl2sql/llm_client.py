from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from .config import LLMConfig
from .logging_utils import get_logger

logger = get_logger(__name__)


class LLMError(RuntimeError):
    pass


class LLMTransportError(LLMError):
    """The chat-completion call itself failed (network, timeout, non-2xx, undecodable body)."""


class LLMResponseFormatError(LLMError):
    """The provider answered, but not with choices[0].message.content."""


class GroqClient:
    """Chat-completion client for Groq's OpenAI-compatible endpoint.

    A fresh ``httpx.AsyncClient`` is opened for every call, so instances hold
    configuration only and can be shared between concurrent requests. Pass
    ``transport`` to substitute the network layer (``httpx.MockTransport`` in
    tests).
    """

    def __init__(
        self,
        cfg: LLMConfig,
        api_key: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._cfg = cfg
        self._api_key = api_key
        self._transport = transport

    def build_payload(self, prompt: str, temperature: Optional[float] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self._cfg.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if temperature is not None:
            payload["temperature"] = temperature
        return payload

    async def complete(self, prompt: str, temperature: Optional[float] = None) -> str:
        """Send ``prompt`` as a single user message and return the reply text."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        payload = self.build_payload(prompt, temperature)
        logger.info("llm_request", model=self._cfg.model, prompt_chars=len(prompt))
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._cfg.request_timeout_s,
            ) as client:
                resp = await client.post(self._cfg.api_url, headers=headers, json=payload)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise LLMTransportError(f"HTTP {exc.response.status_code}: {exc.response.text}") from exc
        except httpx.HTTPError as exc:
            raise LLMTransportError(str(exc) or exc.__class__.__name__) from exc
        except Exception as exc:
            # Bad URL, unencodable header and the like: the call never happened.
            raise LLMTransportError(f"{exc.__class__.__name__}: {exc}") from exc

        # An undecodable body fails the call itself, like a gateway error page.
        try:
            data = resp.json()
        except (ValueError, RecursionError) as exc:
            raise LLMTransportError(f"Response body is not JSON: {exc}") from exc
        return extract_message_content(data)


def extract_message_content(data: Any) -> str:
    """Pull ``choices[0].message.content`` out of a chat-completion reply."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise LLMResponseFormatError(f"Missing choices[0].message.content ({exc!r})") from exc
    if content is None:
        raise LLMResponseFormatError("choices[0].message.content is null")
    if not isinstance(content, str):
        content = str(content)
    return content.strip()


__all__ = [
    "GroqClient",
    "LLMError",
    "LLMResponseFormatError",
    "LLMTransportError",
    "extract_message_content",
]
