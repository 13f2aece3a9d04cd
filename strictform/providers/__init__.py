"""LLM provider adapters for strictform."""

from .base import LLMAPIError, LLMClient, LLMResponse
from .openai import OpenAIClient

__all__ = [
    "LLMAPIError",
    "LLMClient",
    "LLMResponse",
    "OpenAIClient",
]
