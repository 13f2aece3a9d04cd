"""StructuredCompletion: one structured-output request for a declared shape."""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar, Union

from .core.config import CompletionConfig
from .schemas.structured import Refusal, StructuredResult
from .shapes.builder import describe
from .shapes.decoder import decode_choice
from .shapes.emitter import build_response_format
from .providers.base import LLMClient, LLMResponse
from .utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class StructuredCompletion(Generic[T]):
    """Requests a value of a declared shape from an LLM provider.

    Features:
      - Provider-agnostic via the LLMClient protocol (OpenAI default).
      - Lazy client initialisation (no import-time API key check).
      - Shape described and ``response_format`` built once, at construction.
      - Refusals come back as ``StructuredResult.data`` being a ``Refusal``.
      - No retries: transport and decode errors propagate to the caller.
    """

    def __init__(
        self,
        shape: type[T],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        system_prompt: str | None = None,
        client: LLMClient | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        config: CompletionConfig | None = None,
        name: str | None = None,
    ):
        self.shape = shape
        self.config = config or CompletionConfig()
        self.model = model or self.config.model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self.api_key = api_key
        self.base_url = base_url
        self._client: LLMClient | None = client

        self.node = describe(shape)
        self.response_format = build_response_format(self.node, name=name, dialect=self.config.dialect)

    # -- client ----------------------------------------------------------

    def _resolve_client(self) -> LLMClient:
        """Lazily create or return the LLMClient."""
        if self._client is None:
            from .providers.openai import OpenAIClient

            self._client = OpenAIClient(
                api_key=self.api_key,
                base_url=self.base_url,
            )
        return self._client

    # -- message building ------------------------------------------------

    def build_messages(self, user_content: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": user_content})
        return messages

    # -- run -------------------------------------------------------------

    async def run(self, messages: Union[str, list[dict[str, Any]]]) -> StructuredResult:
        """Send one request and decode its first choice.

        Args:
            messages: A user message string, or a full message list.

        Returns:
            ``StructuredResult`` whose ``data`` is the decoded instance or a
            ``Refusal``.

        Raises:
            LLMAPIError: The provider call failed.
            DecodeError: The content does not match the shape.
        """
        if isinstance(messages, str):
            messages = self.build_messages(messages)

        temperature = self.temperature if self.temperature is not None else self.config.temperature
        max_tokens = self.max_tokens if self.max_tokens is not None else self.config.max_tokens

        client = self._resolve_client()
        response: LLMResponse = await client.complete(
            messages=messages,
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format=self.response_format,
        )

        data = decode_choice(self.node, response, dialect=self.config.dialect)
        if isinstance(data, Refusal):
            logger.info(
                "Model '%s' refused to produce %s: %s",
                self.model, self.node.name, data.text,
            )

        return StructuredResult(
            data=data,
            usage=response.usage,
            finish_reason=response.finish_reason,
            raw_content=response.content,
        )
