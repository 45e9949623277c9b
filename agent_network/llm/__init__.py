# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""LLM integration module.

This module is the boundary to the external inference service: a unified
interface over the OpenAI-compatible and Anthropic APIs.
"""

import logging

from .base import (
    Message,
    Completion,
    TimingInfo,
)
from .api import create_completion, get_provider
from .providers import BaseProvider, OpenAIProvider, AnthropicProvider
from ..types.llm_types import TextContent, ToolCallContent, ToolResultContent

# Quieten LLM API call logs to make stdout more useful
logging.getLogger("httpx").setLevel(logging.WARNING)

__all__ = [
    "Message",
    "Completion",
    "TimingInfo",
    "create_completion",
    "get_provider",
    "BaseProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "TextContent",
    "ToolCallContent",
    "ToolResultContent",
]
