# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Utility functions for working with the event bus."""

from .event_bus import EventBus
from ..types.tool_types import ToolResult
from ..types.agent_types import AgentResult
from ..types.event_types import EventType, Event


async def log_to_stdout(event: Event):
    """Print important events to stdout with clear formatting."""

    # Common formatting constants
    max_content_len = 50
    prefix_width = 18

    def truncate(text: str, length: int = max_content_len) -> str:
        """Helper to truncate text and handle newlines"""
        text = text.replace("\n", " ")
        return f"{text[:length]}..." if len(text) > length else text

    def format_output(prefix: str, content: str, metadata: str = "") -> None:
        """Helper to format and print consistent output"""
        print(
            f"{prefix:<{prefix_width}s} => {content}{' | ' + metadata if metadata else ''}"
        )

    event_content = truncate(str(event.content))
    publisher = event.metadata.get("publisher_id", "")

    if event.type == EventType.SYSTEM_PROMPT_UPDATE:
        return
    elif event.type == EventType.TOOL_CALL:
        name = event.metadata.get("name", "unknown tool")
        args = truncate(str(event.metadata.get("args", {})))
        format_output(event.type.value, f"{name}, {args}", publisher)
    elif event.type == EventType.TOOL_RESULT:
        result = event.metadata.get("tool_result")
        if not isinstance(result, ToolResult):
            format_output(event.type.value, f"{event.metadata.get('name')}, no result", publisher)
            return
        content = f"{result.tool_name}, success: {result.success}, "
        content += f"duration: {result.duration:.1f}, {event_content} "
        format_output(event.type.value, content, publisher)
    elif event.type == EventType.ROUND_COMPLETE:
        result = event.metadata.get("agent_result")
        if not isinstance(result, AgentResult):
            return
        duration = result.metrics.duration_seconds or 0.0
        content = f"{result.agent_name}, round: {result.round_index}, "
        content += f"tool calls: {len(result.tool_calls)}, duration: {duration:.1f}"
        format_output(event.type.value, content)
    else:
        format_output(event.type.value, event_content, publisher)


def get_round_events(event_bus: EventBus, round_index: int) -> list[Event]:
    """Get the events published while a given round was running."""
    return [
        e for e in event_bus.get_events()
        if e.metadata.get("round_index") == round_index
    ]
