"""Outcome types for structured LLM responses.

A structured-output choice is either a refusal or a JSON payload, never
both. ``StructuredResult`` wraps the decoded outcome together with the
passthrough envelope fields (usage, finish reason).
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from .base import UsageInfo


T = TypeVar('T')


@dataclass(frozen=True)
class Refusal:
    """The model declined to produce the requested structured content."""

    text: str


@dataclass(frozen=True)
class Payload:
    """Parsed JSON value of a non-refused structured response."""

    value: Any


RefusalOrPayload = Union[Refusal, Payload]


class StructuredResult(BaseModel, Generic[T]):
    """Decoded outcome of a structured completion.

    ``data`` is either an instance of the requested shape or a
    :class:`Refusal`; callers branch on :attr:`is_refusal` before using it.

    Usage:
        result = await completion.run("Hello, my name is John.")
        if result.is_refusal:
            print(result.refusal.text)
        else:
            name = result.data

    Attributes:
        data: The decoded instance, or the refusal
        usage: Token usage statistics (``None`` if the provider omitted them)
        finish_reason: Why generation stopped (``"stop"``, ``"length"``...)
        raw_content: Content string exactly as returned by the provider
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: Union[Refusal, T] = Field(description="Decoded instance or refusal")
    usage: Optional[UsageInfo] = Field(default=None, description="Token usage information")
    finish_reason: Optional[str] = Field(default=None, description="Reason generation stopped")
    raw_content: Optional[str] = Field(default=None, description="Raw content returned by the provider")

    @property
    def is_refusal(self) -> bool:
        """True when the model refused instead of answering."""
        return isinstance(self.data, Refusal)

    @property
    def refusal(self) -> Optional[Refusal]:
        """The refusal, or ``None`` for a regular answer."""
        return self.data if isinstance(self.data, Refusal) else None

    @property
    def total_tokens(self) -> int:
        """Quick access to total tokens (0 when usage is unknown)."""
        return self.usage.total_tokens if self.usage else 0
