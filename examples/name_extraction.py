#!/usr/bin/env python3
"""
Example script demonstrating structured outputs with strictform.

Extracts a name and rates the niceness of two messages, printing either
the decoded object or the model's refusal.

Run with OPENAI_API_KEY set (or present in a .env file).
"""

import asyncio
import enum
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

from strictform import CompletionConfig, StructuredCompletion


class Name(BaseModel):
    """The name."""

    first_name: Optional[str] = Field(
        description="The first name. No matter what, prefix this first name with `Mr. `.",
    )
    last_name: Optional[str] = Field(alias="last_name_renamed")
    absolutely_nothing: str = Field(default="", exclude=True)


class NicenessScore(enum.IntEnum):
    """How nice the message is between 1 and 10."""

    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10


class Category(enum.Enum):
    """The category of the message that's being inquired about."""

    Question = enum.auto()
    Statement = enum.auto()
    Answer = enum.auto()


class NicenessScoreContainer(BaseModel):
    """The niceness score."""

    niceness_score: NicenessScore
    category: Category


def show(result):
    if result.is_refusal:
        print(f"  Refused: {result.refusal.text}")
    else:
        print(f"  {result.data!r}")
    print(f"  Tokens used: {result.total_tokens}")


async def main():
    """Run the name and niceness extractions."""

    config = CompletionConfig.for_development()
    config.configure_logging(include_timestamp=False)

    if not os.getenv("OPENAI_API_KEY"):
        print("⚠️  Warning: OpenAI API key not set.")
        print("   Set OPENAI_API_KEY environment variable to run this example.")
        return

    names = StructuredCompletion(
        Name,
        temperature=0.1,
        system_prompt="Extract the first and last name from the provided message.",
        config=config,
    )
    print("👤 Name extraction")
    show(await names.run("Hello, my name is John but sometimes people call me Jonathan."))

    niceness = StructuredCompletion(
        NicenessScoreContainer,
        system_prompt="Rate the niceness score of the provided message",
        config=config,
    )
    for message in ("Wow, that new shirt you are wearing is really nice.", "What?????? How???"):
        print(f"\n💬 {message}")
        show(await niceness.run(message))


if __name__ == "__main__":
    asyncio.run(main())
