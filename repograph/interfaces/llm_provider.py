"""Abstract base class for LLM service providers.

Three call sites use an LLM, all optional: the pipeline's summary step, its
vision step for image files, and SearchService.answer.  Every failure is
reported as :class:`~repograph.utils.errors.LLMError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAILLMProvider (repograph/providers/llm/)
class ILLMProvider(ABC):
    """Text completion, plus image description where the model allows it."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """Return the model's reply to a system + user prompt pair.

        Raises
        ------
        repograph.utils.errors.LLMError
            On API failure, timeout, or an empty reply.
        """

    @abstractmethod
    async def vision_extract(self, image_bytes: bytes, prompt: str) -> str:
        """Describe *image_bytes* as instructed by *prompt*.

        Callers check :meth:`supports_vision` first; providers without
        vision raise ``NotImplementedError``.
        """

    @abstractmethod
    def supports_vision(self) -> bool: ...

    @abstractmethod
    def get_provider_name(self) -> str: ...

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when credentials are configured."""
