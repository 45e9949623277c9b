# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Content blocks, token accounting and model identifiers shared by the
inference providers and the agents."""

import os

from enum import Enum
from typing import Any, Union
from pydantic import BaseModel, Field


class Provider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class StopReason(str, Enum):
    """Why a completion stopped generating."""

    COMPLETE = "complete"  # natural end of turn, or tool use
    LENGTH = "length"  # hit the output token limit
    ERROR = "error"


class Model(BaseModel):
    """An inference model, identified by the provider-side id."""

    id: str
    provider: Provider = Provider.OPENAI
    max_output_tokens: int = 4096

    def __str__(self) -> str:
        return self.id

    @classmethod
    def from_id(cls, model_id: str, provider: Provider | str | None = None) -> "Model":
        """Build a model from its id, inferring the provider from the name
        when it is not given explicitly."""
        if provider is None:
            provider = (
                Provider.ANTHROPIC if model_id.startswith("claude") else Provider.OPENAI
            )
        return cls(id=model_id, provider=Provider(provider))


class TokenUsage(BaseModel):
    """Token counts for one or more completions."""

    prompt_tokens: int = 0
    cached_prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            cached_prompt_tokens=self.cached_prompt_tokens + other.cached_prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
        )


class TextContent(BaseModel):
    text: str

    def __str__(self) -> str:
        return self.text


class ToolCallContent(BaseModel):
    """A tool invocation requested by the model."""

    call_id: str = Field(default_factory=lambda: f"call_{os.urandom(4).hex()}")
    tool_name: str
    tool_args: dict[str, Any] = Field(default_factory=dict)

    def __str__(self) -> str:
        return f"<TOOL_CALL name='{self.tool_name}' id='{self.call_id}'>{self.tool_args}</TOOL_CALL>"


class ToolResultContent(BaseModel):
    """The result of a tool call, replayed back to the model."""

    call_id: str
    tool_name: str
    content: str

    def __str__(self) -> str:
        return self.content


ContentTypes = Union[TextContent, ToolCallContent, ToolResultContent]
