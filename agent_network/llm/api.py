# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Provider selection and the completion entry point."""

import logging

from typing import Optional, Type

from .base import Message, Completion
from .providers import BaseProvider, OpenAIProvider, AnthropicProvider
from ..config import Settings, get_settings
from ..types.llm_types import Model, Provider
from ..types.tool_types import ToolInterface

logger = logging.getLogger(__name__)


def get_provider(model: Model, settings: Settings | None = None) -> BaseProvider:
    """Build a provider for the given model from the configured credentials."""
    settings = settings or get_settings()
    match model.provider:
        case Provider.ANTHROPIC:
            return AnthropicProvider(api_key=settings.ANTHROPIC_API_KEY)
        case Provider.OPENAI:
            return OpenAIProvider(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL,
            )
    raise ValueError(f"No provider available for model {model.id} ({model.provider})")


async def create_completion(
    messages: list[Message],
    model: Model,
    provider: BaseProvider | None = None,
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
    available_tools: list[Type[ToolInterface]] | None = None,
) -> Completion:
    """Run a single completion, building the provider from settings when none
    is given."""
    if provider is None:
        provider = get_provider(model)

    logger.debug(f"Requesting completion from {model.id} with {len(messages)} messages")
    completion = await provider.create_completion(
        messages=messages,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        available_tools=available_tools,
    )
    logger.debug(f"Completion {completion.id}: {completion.usage.total_tokens} tokens, stop reason {completion.stop_reason.value}")
    return completion
