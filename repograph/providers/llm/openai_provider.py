"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
Supports both text completion (summaries, answers) and vision analysis
(image descriptions).  When a custom ``openai_base_url`` is configured the
client points at that URL instead of the default OpenAI endpoint.
"""

from __future__ import annotations

import base64

import openai
import structlog

from repograph.config.settings import Settings
from repograph.interfaces.llm_provider import ILLMProvider
from repograph.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TEXT_MODEL = "gpt-4o-mini"
_DEFAULT_VISION_MODEL = "gpt-4o"


def _detect_media_type(image_bytes: bytes) -> str:
    """Detect the MIME type of an image from its magic bytes."""
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    # JPEG and anything unrecognised.
    return "image/jpeg"


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible API.

    Uses ``gpt-4o-mini`` for text and ``gpt-4o`` for vision by default.
    Vision is assumed available on OpenAI proper; against a custom
    ``base_url`` it is enabled only when ``openai_vision_model`` is set.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._timeout = settings.http_timeout

        client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(self._timeout, connect=5.0),
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url
            self._provider_label = "openai-compatible"
        else:
            self._provider_label = "openai"

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._text_model = settings.openai_text_model or _DEFAULT_TEXT_MODEL
        self._vision_model = settings.openai_vision_model or _DEFAULT_VISION_MODEL
        self._has_vision = bool(settings.openai_vision_model) or not settings.openai_base_url

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        return await self._chat(
            operation="completion",
            model=self._text_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def vision_extract(self, image_bytes: bytes, prompt: str) -> str:
        if not self._has_vision:
            raise NotImplementedError(
                f"{self._provider_label} is not configured with a vision model"
            )

        data_url = (
            f"data:{_detect_media_type(image_bytes)};base64,"
            f"{base64.b64encode(image_bytes).decode('ascii')}"
        )
        return await self._chat(
            operation="vision",
            model=self._vision_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
            max_tokens=1000,
        )

    def supports_vision(self) -> bool:
        return self._has_vision

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return self._provider_label

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _chat(
        self,
        operation: str,
        model: str,
        messages: list[dict],
        max_tokens: int,
        temperature: float | None = None,
    ) -> str:
        """Send one chat request and return the first choice's text.

        Timeouts, API errors and empty replies all surface as
        :class:`LLMError` tagged with this provider's name.
        """
        request: dict = {"model": model, "messages": messages, "max_tokens": max_tokens}
        if temperature is not None:
            request["temperature"] = temperature

        try:
            response = await self._client.chat.completions.create(**request)
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"{self._provider_label} {operation} timed out after {self._timeout:g}s",
                provider_name=self._provider_label,
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self._provider_label} {operation} failed: {exc}",
                provider_name=self._provider_label,
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError(
                message=f"{self._provider_label} {operation} returned an empty response",
                provider_name=self._provider_label,
            )

        logger.info(
            "llm_call_complete",
            operation=operation,
            model=model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content
