"""Base schema types for strictform responses."""

from pydantic import BaseModel


class UsageInfo(BaseModel):
    """Token usage from a single LLM call.

    Attributes:
        prompt_tokens: Number of tokens in the prompt/input.
        completion_tokens: Number of tokens in the completion/output.
        total_tokens: Sum of prompt and completion tokens.
        model: Model identifier that served the request.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    model: str = ""
