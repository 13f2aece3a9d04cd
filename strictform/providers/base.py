"""LLMClient protocol and LLMResponse: provider-agnostic LLM interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from ..schemas.base import UsageInfo


@dataclass
class LLMResponse:
    """First choice of a chat completion, as returned by a provider.

    Attributes:
        content: The text content of the choice (``None`` on refusal).
        refusal: The provider's separate refusal string, if any.
        usage: Token usage information.
        finish_reason: Why generation stopped (``"stop"``, ``"length"``...).

    The object also satisfies the ``choice.message`` shape read by
    ``decode_choice`` through :attr:`message`.
    """

    content: Optional[str]
    refusal: Optional[str] = None
    usage: Optional[UsageInfo] = None
    finish_reason: Optional[str] = None

    @property
    def message(self) -> "LLMResponse":
        return self


class LLMAPIError(Exception):
    """Provider-agnostic API error.

    Wraps provider-specific errors (openai.RateLimitError, openai.APIError, etc.)
    so callers that implement their own retry policy don't need to know
    about specific SDKs.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: float | None = None,
        is_rate_limit: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after
        self.is_rate_limit = is_rate_limit


@runtime_checkable
class LLMClient(Protocol):
    """Protocol all LLM provider adapters must satisfy."""

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse: ...
