# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Base provider interface for LLM interactions."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from ..base import Message, Completion
from ...types.llm_types import Model, StopReason
from ...types.tool_types import ToolInterface

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Abstract base class for LLM providers.

    A provider is the network's only view of the inference service: it takes
    the rendered instructions and projected history as messages, plus the
    calling agent's tool classes, and returns the model's text and requested
    tool calls as a Completion.
    """

    def map_stop_reason(self, finish_reason: Any) -> StopReason:
        """Map provider-specific stop information to standard format."""
        # Default implementation assumes a normal completion
        return StopReason.COMPLETE

    def pydantic_to_native_tool(self, tool: Type[ToolInterface]) -> dict:
        """
        Converts a tool class into a schema for native tool calling for this
        particular provider. Defaults to the OpenAI function format.
        """
        if hasattr(tool, "TOOL_NAME"):
            return tool.to_native_schema()
        raise ValueError(f"provided tool {tool} is not a tool")

    # Abstract methods --------------------------------------------------------

    @abstractmethod
    def _prepare_messages(self, messages: list[Message]) -> Any:
        """Maps our framework-specific message list into provider-specific messages

        Note that this might involve agglomerating content blocks, or splitting
        out into multiple messages.
        """
        pass

    @abstractmethod
    async def create_completion(
        self,
        messages: list[Message],
        model: Model,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        available_tools: list[Type[ToolInterface]] | None = None,
    ) -> Completion:
        """Create a completion using this provider."""
        pass
