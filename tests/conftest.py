# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Shared fixtures: a scripted inference provider and network helpers."""
import pytest

from typing import Any

from agent_network.llm import Completion
from agent_network.llm.providers import BaseProvider
from agent_network.types.llm_types import Model, StopReason, TextContent, ToolCallContent


class ScriptedProvider(BaseProvider):
    """Returns canned completions in order and records every request."""

    def __init__(self, completions: list[Completion]):
        self.completions = list(completions)
        self.requests: list[dict[str, Any]] = []

    def _prepare_messages(self, messages):
        return messages

    async def create_completion(
        self,
        messages,
        model,
        temperature=0.7,
        max_tokens=None,
        available_tools=None,
    ) -> Completion:
        self.requests.append(
            dict(
                messages=messages,
                model=model,
                temperature=temperature,
                available_tools=available_tools or [],
            )
        )
        if not self.completions:
            raise RuntimeError("ScriptedProvider ran out of completions")
        return self.completions.pop(0)


def make_completion(*calls: tuple[str, dict], text: str = "", stop_reason: StopReason = StopReason.COMPLETE) -> Completion:
    """A completion with optional text followed by the given (tool, args) calls."""
    content = []
    if text:
        content.append(TextContent(text=text))
    for i, (name, args) in enumerate(calls):
        content.append(ToolCallContent(call_id=f"call_{i}", tool_name=name, tool_args=args))
    return Completion(
        id="test-completion",
        content=content,
        model=Model(id="test-model"),
        stop_reason=stop_reason,
    )


@pytest.fixture
def test_model() -> Model:
    return Model(id="test-model")


@pytest.fixture
def scripted_provider():
    """Factory: ``scripted_provider(completion, ...)``."""
    def _make(*completions: Completion) -> ScriptedProvider:
        return ScriptedProvider(list(completions))
    return _make


@pytest.fixture
def completion():
    """Factory: ``completion(("tool", {...}), ..., text="...")``."""
    return make_completion
