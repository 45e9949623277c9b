# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Base models and shared functionality for LLM interactions."""

from typing import Optional
from datetime import datetime, timedelta
from pydantic import BaseModel, Field

from ..types.llm_types import TokenUsage, Model, StopReason, TextContent, ToolCallContent, ToolResultContent, ContentTypes


class Message(BaseModel):
    """A message in a conversation with an LLM."""

    role: str
    content: list[ContentTypes]
    name: Optional[str] = None

    def __str__(self) -> str:
        parts = [f"Message from role={self.role}"]
        for c in self.content:
            if isinstance(c, TextContent):
                parts.append(f"Text {'-'*10}\n{c.text}")
            elif isinstance(c, ToolCallContent):
                parts.append(f"{'-'*10}\nTool call {c.tool_name} (id: {c.call_id}): {str(c.tool_args)}\n{'-'*10}")
            elif isinstance(c, ToolResultContent):
                parts.append(f"{'-'*10}\nTool result {c.tool_name} (id: {c.call_id}): {c.content}\n{'-'*10}")
        return "\n".join(parts)


class TimingInfo(BaseModel):
    """Timing information for LLM interactions."""

    start_time: datetime = Field(description="When the request started")
    end_time: datetime = Field(description="When the response completed")
    total_duration: timedelta = Field(description="Total duration of the request")
    tokens_per_second: Optional[float] = Field(
        None, description="Average tokens per second for completion"
    )

    @classmethod
    def measure(cls, start_time: datetime, output_token_count: int, end_time: datetime | None = None) -> "TimingInfo":
        if end_time is None:
            end_time = datetime.now()
        total_duration = end_time - start_time
        return cls(
            start_time=start_time,
            end_time=end_time,
            total_duration=total_duration,
            tokens_per_second=(
                output_token_count / total_duration.total_seconds()
                if total_duration.total_seconds() > 0
                else None
            ),
        )

    def __str__(self) -> str:
        fmt = "%Y-%m-%d %H:%M:%S"
        parts = [
            f"- Start {self.start_time.strftime(fmt)}, End {self.end_time.strftime(fmt)}",
            f"- Duration: {self.total_duration}",
        ]
        if self.tokens_per_second is not None:
            parts.append(f"- TPS: {self.tokens_per_second:.2f}")
        return "\n".join(parts)


# Completion Types ============================================================

class Completion(BaseModel):
    """A completion response from an LLM."""

    id: str
    content: list[ContentTypes]
    model: Model
    usage: TokenUsage = TokenUsage()
    timing: Optional[TimingInfo] = None
    stop_reason: StopReason = StopReason.COMPLETE
    raw_response: Optional[dict] = Field(default=None, exclude=True)

    @property
    def text_blocks(self) -> list[str]:
        return [b.text for b in self.content if isinstance(b, TextContent)]

    @property
    def tool_calls(self) -> list[ToolCallContent]:
        return [b for b in self.content if isinstance(b, ToolCallContent)]

    @property
    def hit_token_limit(self) -> bool:
        """Check if completion stopped due to token length."""
        return self.stop_reason == StopReason.LENGTH

    @property
    def errored(self) -> bool:
        """Check if completion encountered an error."""
        return self.stop_reason == StopReason.ERROR

    def __str__(self) -> str:
        comp_str = f"{'='*80}\n"
        for block in self.content:
            comp_str += str(block) + "\n"
        comp_str += f"\n{'-'*80}\n"
        comp_str += f"Model: {self.model.id}\n"
        comp_str += f"""Tokens used:
- Input {self.usage.prompt_tokens} (cached: {self.usage.cached_prompt_tokens})
- Completion {self.usage.completion_tokens}
- Total {self.usage.total_tokens}
"""
        if self.stop_reason != StopReason.COMPLETE:
            comp_str += f"Stop reason: {self.stop_reason.value}\n"

        if self.timing:
            comp_str += f"Timing:\n{self.timing}\n"

        comp_str += f"{'='*80}\n"
        return comp_str
