# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""OpenAI-compatible chat completions provider.

Works against any endpoint that speaks the OpenAI chat completions protocol
with native function calling (OpenAI, DeepSeek, vLLM, Ollama's /v1, ...).
"""

import json
import logging

from typing import Any, Optional, Type
from openai import AsyncOpenAI
from datetime import datetime

from ..base import Message, Completion, TimingInfo
from .base_provider import BaseProvider
from ...types.llm_types import TokenUsage, Model, StopReason, TextContent, ToolCallContent, ToolResultContent
from ...types.tool_types import ToolInterface

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseProvider):
    """Provider implementation for OpenAI-compatible chat models."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None, client: AsyncOpenAI | None = None):
        self.client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    def map_stop_reason(self, finish_reason: Any) -> StopReason:
        """Map OpenAI finish reasons to our standard format."""
        if finish_reason in ("length", "insufficient_system_resource"):
            return StopReason.LENGTH
        elif finish_reason in ("error", "content_filter"):
            return StopReason.ERROR
        else:  # 'stop', 'tool_calls' or others
            return StopReason.COMPLETE

    def _create_token_usage(self, response: Any) -> TokenUsage:
        """Create TokenUsage object from response."""
        usage = getattr(response, "usage", None)
        if not usage:
            logger.warning("Missing usage information from API response. Setting to 0")
            return TokenUsage()

        details = getattr(usage, "prompt_tokens_details", None)
        return TokenUsage(
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            cached_prompt_tokens=(getattr(details, "cached_tokens", 0) or 0) if details else 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )

    def _prepare_messages(self, messages: list[Message]) -> list[dict]:
        api_messages = []
        for msg in messages:
            if msg.role == "assistant":
                msg_content = ""
                tool_calls = []
                for block in msg.content:
                    if isinstance(block, TextContent):
                        msg_content += block.text
                    elif isinstance(block, ToolCallContent):
                        tool_calls.append({
                            "id": block.call_id,
                            "type": "function",
                            "function": {
                                "name": block.tool_name,
                                "arguments": json.dumps(block.tool_args),
                            },
                        })
                api_msg: dict[str, Any] = {"role": "assistant", "content": msg_content or None}
                if tool_calls:
                    api_msg["tool_calls"] = tool_calls
                api_messages.append(api_msg)
            else:
                msg_content = ""
                for block in msg.content:
                    if isinstance(block, TextContent):
                        msg_content += block.text
                    elif isinstance(block, ToolResultContent):
                        # Append what we have so far
                        if msg_content != "":
                            api_messages.append({"role": msg.role, "content": msg_content})
                            msg_content = ""
                        api_messages.append({"role": "tool", "tool_call_id": block.call_id, "content": block.content})
                if msg_content != "":
                    api_messages.append({"role": msg.role, "content": msg_content})

        return api_messages

    def _parse_tool_arguments(self, raw: str | None) -> dict:
        if not raw:
            return {}
        try:
            args = json.loads(raw)
        except json.JSONDecodeError as e:
            # Let schema validation reject the call rather than the round
            logger.warning(f"Could not decode tool arguments: {e}")
            return {"__raw_arguments__": raw}
        return args if isinstance(args, dict) else {"__raw_arguments__": args}

    async def create_completion(
        self,
        messages: list[Message],
        model: Model,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        available_tools: list[Type[ToolInterface]] | None = None,
    ) -> Completion:
        start_time = datetime.now()

        args: dict[str, Any] = {
            "messages": self._prepare_messages(messages),
            "model": model.id,
            "temperature": temperature,
            "max_tokens": max_tokens or model.max_output_tokens,
        }
        if available_tools:
            args["tools"] = [self.pydantic_to_native_tool(t) for t in available_tools]

        response = await self.client.chat.completions.create(**args)

        token_usage = self._create_token_usage(response)
        choice = response.choices[0]
        message = choice.message

        content = []
        if message.content:
            content.append(TextContent(text=message.content))
        for tool_call in message.tool_calls or []:
            content.append(ToolCallContent(
                call_id=tool_call.id,
                tool_name=tool_call.function.name,
                tool_args=self._parse_tool_arguments(tool_call.function.arguments),
            ))

        return Completion(
            id=response.id,
            content=content,
            model=model,
            usage=token_usage,
            timing=TimingInfo.measure(start_time, token_usage.completion_tokens),
            stop_reason=self.map_stop_reason(choice.finish_reason),
        )
