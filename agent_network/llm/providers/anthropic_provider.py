# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Anthropic messages API provider."""

import logging

from typing import Any, Optional, Type
from anthropic import AsyncAnthropic
from datetime import datetime

from ..base import Message, Completion, TimingInfo
from .base_provider import BaseProvider
from ...types.llm_types import TokenUsage, Model, StopReason, TextContent, ToolCallContent, ToolResultContent
from ...types.tool_types import ToolInterface

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    """Provider implementation for Anthropic's models."""

    def __init__(self, api_key: str | None = None, client: AsyncAnthropic | None = None):
        self.client = client or AsyncAnthropic(api_key=api_key)

    def map_stop_reason(self, finish_reason: Any) -> StopReason:
        if finish_reason == "max_tokens":
            return StopReason.LENGTH
        elif finish_reason in ("end_turn", "tool_use", "stop_sequence", None):
            return StopReason.COMPLETE
        return StopReason.ERROR

    def pydantic_to_native_tool(self, tool: Type[ToolInterface]) -> dict:
        function = super().pydantic_to_native_tool(tool)["function"]
        return {
            "name": function["name"],
            "description": function["description"],
            "input_schema": function["parameters"],
        }

    def _prepare_messages(self, messages: list[Message]) -> tuple[str, list[dict]]:
        """Returns the system prompt and the alternating message list.

        Consecutive messages with the same role are merged, since the API
        requires strict user/assistant alternation.
        """
        system_parts: list[str] = []
        api_messages: list[dict] = []

        for msg in messages:
            if msg.role == "system":
                system_parts.extend(b.text for b in msg.content if isinstance(b, TextContent))
                continue

            blocks: list[dict] = []
            for block in msg.content:
                if isinstance(block, TextContent):
                    if block.text:
                        blocks.append({"type": "text", "text": block.text})
                elif isinstance(block, ToolCallContent):
                    blocks.append({
                        "type": "tool_use",
                        "id": block.call_id,
                        "name": block.tool_name,
                        "input": block.tool_args,
                    })
                elif isinstance(block, ToolResultContent):
                    blocks.append({
                        "type": "tool_result",
                        "tool_use_id": block.call_id,
                        "content": block.content,
                    })
            if not blocks:
                continue

            if api_messages and api_messages[-1]["role"] == msg.role:
                api_messages[-1]["content"].extend(blocks)
            else:
                api_messages.append({"role": msg.role, "content": blocks})

        return "\n\n".join(system_parts), api_messages

    async def create_completion(
        self,
        messages: list[Message],
        model: Model,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        available_tools: list[Type[ToolInterface]] | None = None,
    ) -> Completion:
        start_time = datetime.now()
        system, api_messages = self._prepare_messages(messages)

        args: dict[str, Any] = {
            "model": model.id,
            "messages": api_messages,
            "temperature": min(temperature, 1.0),
            "max_tokens": max_tokens or model.max_output_tokens,
        }
        if system:
            args["system"] = system
        if available_tools:
            args["tools"] = [self.pydantic_to_native_tool(t) for t in available_tools]

        response = await self.client.messages.create(**args)

        content = []
        for block in response.content:
            if block.type == "text":
                content.append(TextContent(text=block.text))
            elif block.type == "tool_use":
                content.append(ToolCallContent(
                    call_id=block.id,
                    tool_name=block.name,
                    tool_args=dict(block.input or {}),
                ))

        usage = response.usage
        token_usage = TokenUsage(
            prompt_tokens=usage.input_tokens,
            cached_prompt_tokens=getattr(usage, "cache_read_input_tokens", 0) or 0,
            completion_tokens=usage.output_tokens,
        )

        return Completion(
            id=response.id,
            content=content,
            model=model,
            usage=token_usage,
            timing=TimingInfo.measure(start_time, token_usage.completion_tokens),
            stop_reason=self.map_stop_reason(response.stop_reason),
        )
