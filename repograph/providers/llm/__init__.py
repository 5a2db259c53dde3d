"""LLM provider adapters.

OpenAILLMProvider implements ILLMProvider against OpenAI or any
OpenAI-compatible chat completions API.  main.py creates it only when an
API key is configured; without one the pipeline skips summaries and vision.
"""

from repograph.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider"]
