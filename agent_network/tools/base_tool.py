# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from __future__ import annotations

import time
import asyncio
import inspect
import logging

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping, Optional, TYPE_CHECKING
from pydantic import BaseModel, PrivateAttr, ValidationError, create_model

from ..types.tool_types import ToolInterface, ToolResult, ToolCallRecord, ToolErrorType
from ..types.event_types import EventType, Event
from ..types.llm_types import ToolCallContent

if TYPE_CHECKING:
    from ..agents.base_agent import BaseAgent
    from ..network.network import Network
    from ..network.state import NetworkState

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@dataclass
class ToolContext:
    """What a tool can reach while it runs: the network it runs in (and
    through it, the shared state) and the agent that called it.

    Both are None when a tool is exercised outside of a running network.
    """

    network: Optional[Network] = None
    agent: Optional[BaseAgent] = None
    round_index: Optional[int] = None

    @property
    def state(self) -> Optional[NetworkState]:
        return self.network.state if self.network is not None else None


class BaseTool(ToolInterface):
    """Abstract base class for all tools.

    The pydantic fields of a subclass are the tool's input schema; arguments
    are validated by constructing the model, so a handler never sees
    arguments that do not satisfy it.

    Tools that read or write shared state must check ``self.network`` and
    return None without side effects when it is absent.
    """

    # Class variables for tool metadata
    TOOL_NAME: ClassVar[str]
    TOOL_DESCRIPTION: ClassVar[str]

    _context: ToolContext = PrivateAttr(default_factory=ToolContext)

    def bind(self, context: ToolContext) -> "BaseTool":
        self._context = context
        return self

    @property
    def context(self) -> ToolContext:
        return self._context

    @property
    def network(self) -> Optional[Network]:
        return self._context.network

    @property
    def state(self) -> Optional[NetworkState]:
        return self._context.state

    @classmethod
    def to_native_schema(cls) -> dict:
        """Convert the tool definition to a function calling schema"""
        parameters = cls.model_json_schema()
        parameters.pop("title", None)
        return {
            "type": "function",
            "function": {
                "name": cls.TOOL_NAME,
                "description": cls.TOOL_DESCRIPTION,
                "parameters": parameters,
            },
        }

    def _result(self, output: Any = None, **kwargs) -> ToolResult:
        return ToolResult(tool_name=self.TOOL_NAME, success=True, output=output, **kwargs)

    def _error(self, errors: str, **kwargs) -> ToolResult:
        return ToolResult(tool_name=self.TOOL_NAME, success=False, errors=errors, **kwargs)


class FunctionTool(BaseTool):
    """A tool whose behaviour is a plain function; see ``create_tool``."""

    HANDLER: ClassVar[Callable[..., Any]]
    ARGS_MODEL: ClassVar[Optional[type[BaseModel]]] = None

    async def run(self) -> ToolResult | None:
        if self.network is None:
            return None

        args = self.ARGS_MODEL.model_validate(self.model_dump()) if self.ARGS_MODEL else self
        value = type(self).HANDLER(args, self._context)
        if inspect.isawaitable(value):
            value = await value
        if value is None or isinstance(value, ToolResult):
            return value
        return self._result(value)


def create_tool(
    name: str,
    description: str,
    handler: Callable[[Any, ToolContext], Any],
    args_model: type[BaseModel] | None = None,
) -> type[BaseTool]:
    """Build a tool class from a handler function.

    The handler is called as ``handler(args, context)`` and may be sync or
    async. It is only called while a network is bound; outside of one the
    tool returns None. Return values that are not a ToolResult become the
    output of a successful one.
    """
    fields = {}
    if args_model is not None:
        fields = {k: (f.annotation, f) for k, f in args_model.model_fields.items()}

    class_name = "".join(part.capitalize() for part in name.replace("-", "_").split("_")) or "Function"
    tool_cls = create_model(f"{class_name}Tool", __base__=FunctionTool, **fields)
    tool_cls.TOOL_NAME = name
    tool_cls.TOOL_DESCRIPTION = description
    tool_cls.HANDLER = staticmethod(handler)
    tool_cls.ARGS_MODEL = args_model
    return tool_cls


async def _publish(context: ToolContext, event: Event) -> None:
    if context.network is None:
        return
    publisher = context.agent.AGENT_NAME if context.agent is not None else context.network.name
    event.metadata.setdefault("round_index", context.round_index)
    await context.network.event_bus.publish(event, publisher)


async def handle_tool_call(
    tool_content: ToolCallContent,
    tools: Mapping[str, type[BaseTool]],
    context: ToolContext,
    timeout: float | None = None,
) -> ToolCallRecord:
    """Resolve a tool call against a capability table, validate its arguments
    and run it.

    Unknown tools and invalid arguments are returned as failed records without
    running anything. Exceptions raised by the handler itself propagate to the
    caller.
    """
    record = ToolCallRecord(
        call_id=tool_content.call_id,
        tool_name=tool_content.tool_name,
        tool_args=tool_content.tool_args,
    )
    await _publish(context, Event(
        type=EventType.TOOL_CALL,
        content=str(tool_content),
        metadata=dict(call_id=record.call_id, name=record.tool_name, args=record.tool_args),
    ))

    tool_cls = tools.get(tool_content.tool_name)
    if tool_cls is None:
        record.error_type = ToolErrorType.UNAVAILABLE
        record.result = ToolResult(
            tool_name=tool_content.tool_name,
            success=False,
            errors=f"Tool {tool_content.tool_name} is not available in your current tool set. Available tools: {', '.join(tools)}",
        )
        logger.warning(f"Unavailable tool requested: {tool_content.tool_name}")
    else:
        try:
            tool = tool_cls.model_validate(tool_content.tool_args)
        except ValidationError as e:
            record.error_type = ToolErrorType.VALIDATION
            record.result = ToolResult(
                tool_name=tool_content.tool_name,
                success=False,
                errors=f"Invalid arguments for {tool_content.tool_name}: {e}",
            )
            logger.warning(f"Tool argument validation failed for {tool_content.tool_name}: {e.error_count()} error(s)")
        else:
            tool.bind(context)
            start_time = time.time()
            if timeout is not None:
                async with asyncio.timeout(timeout):
                    tool_result = await tool.run()
            else:
                tool_result = await tool.run()
            if tool_result is not None:
                tool_result.duration = time.time() - start_time
            record.result = tool_result

    await _publish(context, Event(
        type=EventType.TOOL_RESULT,
        content=str(record.result) if record.result is not None else "",
        metadata=dict(
            call_id=record.call_id,
            name=record.tool_name,
            args=record.tool_args,
            tool_result=record.result,
            error_type=record.error_type,
        ),
    ))
    return record
