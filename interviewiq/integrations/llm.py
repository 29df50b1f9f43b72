"""
Gemini Text Generation Relay

Relays assistant prompts to the Gemini ``generateContent`` REST endpoint.
The relay never raises: any failure becomes a fallback reply carrying the
error message, so callers can always render something.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from interviewiq.common.config import AIConfig
from interviewiq.common.error_handling import (
    ExternalServiceError,
    ExternalServiceTimeoutError,
    InterviewIQError,
    retry,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "gemini"
FALLBACK_REPLY = "Sorry, I encountered an error processing your request."
EMPTY_REPLY = "No response generated"


@dataclass(frozen=True)
class LLMReply:
    """Generated text, plus the error message when the call failed."""
    text: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data = {"text": self.text}
        if self.error is not None:
            data["error"] = self.error
        return data


def extract_text(payload: Dict[str, Any]) -> str:
    """Pull the first candidate's text out of a generateContent response."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return EMPTY_REPLY
    return text or EMPTY_REPLY


class GeminiClient:
    """
    Async client for Gemini text generation.

    Args:
        config: AI section of the application config
        session: Optional shared aiohttp session; one is created lazily
            otherwise and closed by ``close()``
    """

    def __init__(self, config: AIConfig, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self._session = session
        self._owns_session = session is None
        self._request_with_retry = retry(
            max_retries=config.max_retries,
            retry_delay=0.5,
            retry_exceptions=(ExternalServiceError,),
        )(self._request_completion)

    @property
    def endpoint(self) -> str:
        return f"{self.config.api_base}/models/{self.config.model_name}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "topK": self.config.top_k,
                "topP": self.config.top_p,
                "maxOutputTokens": self.config.max_output_tokens,
            },
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            )
            self._owns_session = True
        return self._session

    async def _request_completion(self, prompt: str) -> Dict[str, Any]:
        session = self._get_session()
        try:
            async with session.post(
                self.endpoint,
                params={"key": self.config.api_key},
                json=self.build_payload(prompt),
            ) as response:
                if response.status != 200:
                    body = await response.text()
                    raise ExternalServiceError(
                        SERVICE_NAME,
                        f"Gemini API error: {response.status}",
                        details={"status": response.status, "body": body[:500]},
                    )
                return await response.json()
        except asyncio.TimeoutError as e:
            raise ExternalServiceTimeoutError(SERVICE_NAME, "generateContent", self.config.timeout, cause=e)
        except aiohttp.ClientError as e:
            raise ExternalServiceError(SERVICE_NAME, f"Gemini request failed: {e}", cause=e)

    async def generate(self, prompt: str) -> LLMReply:
        """
        Generate a reply for a prompt.

        Returns:
            The reply; on failure the fallback text with ``error`` set
        """
        if not self.config.api_key:
            logger.warning("Gemini API key is not configured, returning fallback reply")
            return LLMReply(text=FALLBACK_REPLY, error="Gemini API key is not configured")

        try:
            payload = await self._request_with_retry(prompt)
        except InterviewIQError as e:
            logger.error(f"Gemini relay failed: {e}")
            return LLMReply(text=FALLBACK_REPLY, error=e.message)

        text = extract_text(payload)
        logger.info(f"Gemini reply received ({len(text)} chars)")
        return LLMReply(text=text)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
