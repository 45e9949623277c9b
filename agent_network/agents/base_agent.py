# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from __future__ import annotations

import asyncio
import logging

from typing import Any, ClassVar, Mapping, Optional, Sequence, TYPE_CHECKING
from datetime import datetime
from pydantic import PrivateAttr

from ..llm import Message, Completion, create_completion
from ..errors import RoundError
from ..tools.base_tool import BaseTool, ToolContext, handle_tool_call
from ..types.agent_types import AgentInterface, AgentMetrics, AgentResult
from ..types.tool_types import ToolCallRecord, ToolErrorType, ToolResult
from ..types.event_types import EventType, Event
from ..types.llm_types import Model, TextContent, ToolCallContent, ToolResultContent

if TYPE_CHECKING:
    from ..network.network import Network

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

NO_VALUE = "<TOOL_RESPONSE>\n<STATUS>SUCCESS</STATUS>\n</TOOL_RESPONSE>"
CONTINUE_PROMPT = "Continue with the task."


class _StateFormatter(dict):
    """Template namespace over a state snapshot. Missing fields render as
    'None' rather than failing, so a template can mention optional state."""

    def __missing__(self, key: str) -> str:
        return "None"


class BaseAgent(AgentInterface):
    """
    Abstract base class for all agents.

    Subclasses declare their role through the class variables and usually
    override ``is_eligible`` (the gate) and ``render_instructions``. The round
    itself is split in two so the network can treat the phases differently
    under cancellation: ``infer`` has no side effects on the shared state,
    ``dispatch`` applies the requested tool calls.
    """

    # Required class-level attributes
    AGENT_NAME: ClassVar[str]
    AGENT_DESCRIPTION: ClassVar[str]
    SYSTEM_PROMPT: ClassVar[str] = ""

    # Optional class-level configuration
    AVAILABLE_TOOLS: ClassVar[list[type[BaseTool]]] = []
    MODEL: ClassVar[Optional[Model]] = None
    TEMPERATURE: ClassVar[float] = 0.666
    MAX_TOKENS: ClassVar[Optional[int]] = None

    # Per-instance overrides of the class configuration
    model: Optional[Model] = None
    temperature: Optional[float] = None

    _tools: dict[str, type[BaseTool]] = PrivateAttr(default_factory=dict)

    def __init__(self, **data):
        super().__init__(**data)

        names = [t.TOOL_NAME for t in self.AVAILABLE_TOOLS]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(
                f"Agent {self.AGENT_NAME} declares duplicate tool names: {', '.join(duplicates)}"
            )
        self._tools = {t.TOOL_NAME: t for t in self.AVAILABLE_TOOLS}

    @property
    def name(self) -> str:
        return self.AGENT_NAME

    @property
    def tools(self) -> Mapping[str, type[BaseTool]]:
        """The capability table: tool name to tool class."""
        return self._tools

    def resolve_model(self, network: Network) -> Model:
        model = self.model or self.MODEL or network.model
        if model is None:
            raise ValueError(f"No model configured for agent {self.AGENT_NAME}")
        return model

    # Gate, history and instructions ------------------------------------------

    def is_eligible(self, state: dict[str, Any]) -> bool:
        return True

    def project_history(self, results: Sequence[AgentResult]) -> list[Message]:
        """
        Replays this agent's own rounds, in log order, as alternating
        assistant/user messages. Rounds run by other agents are left out: each
        agent reasons over its own prior turns only.
        """
        messages: list[Message] = []
        for result in results:
            if result.agent_name != self.AGENT_NAME:
                continue

            assistant_content: list = [TextContent(text=text) for text in result.output]
            assistant_content.extend(
                ToolCallContent(
                    call_id=record.call_id,
                    tool_name=record.tool_name,
                    tool_args=record.tool_args,
                )
                for record in result.tool_calls
            )
            if not assistant_content:
                continue
            messages.append(Message(role="assistant", content=assistant_content))

            # Every call gets a result block, including calls that returned
            # nothing
            if result.tool_calls:
                messages.append(Message(role="user", content=[
                    ToolResultContent(
                        call_id=record.call_id,
                        tool_name=record.tool_name,
                        content=str(record.result) if record.result is not None else NO_VALUE,
                    )
                    for record in result.tool_calls
                ]))
        return messages

    def render_instructions(self, state: dict[str, Any]) -> str:
        return self.SYSTEM_PROMPT.format_map(_StateFormatter(state))

    def prompt(self, network: Network) -> str:
        """The opening user message of every round: the task input."""
        return network.input

    # Round -------------------------------------------------------------------

    async def infer(self, network: Network) -> Completion:
        try:
            snapshot = network.state.get()
            history = self.project_history(network.state.results)
            instructions = self.render_instructions(snapshot)
            model = self.resolve_model(network)
        except Exception as e:
            raise RoundError(self.AGENT_NAME, e) from e

        if network.provider is None:
            raise RoundError(self.AGENT_NAME, message=f"Network {network.name} has no inference provider")

        await network.event_bus.publish(
            Event(
                type=EventType.SYSTEM_PROMPT_UPDATE,
                content=instructions,
                metadata=dict(round_index=len(network.state.results)),
            ),
            self.AGENT_NAME,
        )

        messages = [
            Message(role="system", content=[TextContent(text=instructions)]),
            Message(role="user", content=[TextContent(text=self.prompt(network))]),
            *history,
        ]
        # A trailing assistant message would be taken as a prefill
        if messages[-1].role == "assistant":
            messages.append(Message(role="user", content=[TextContent(text=CONTINUE_PROMPT)]))

        logger.info(f"Awaiting completion for {self.AGENT_NAME} ({len(messages)} messages, {len(history)} from history)...")
        try:
            async with asyncio.timeout(network.round_timeout):
                completion = await create_completion(
                    messages=messages,
                    provider=network.provider,
                    model=model,
                    temperature=self.temperature if self.temperature is not None else self.TEMPERATURE,
                    max_tokens=self.MAX_TOKENS,
                    available_tools=list(self._tools.values()),
                )
        except Exception as e:
            raise RoundError(self.AGENT_NAME, e) from e

        if completion.errored:
            raise RoundError(self.AGENT_NAME, message=f"Completion for {self.AGENT_NAME} stopped with an error")
        if completion.hit_token_limit:
            logger.warning(f"Completion for {self.AGENT_NAME} hit the output token limit")
            await network.event_bus.publish(
                Event(
                    type=EventType.APPLICATION_WARNING,
                    content="Completion truncated at the output token limit",
                    metadata=dict(round_index=len(network.state.results)),
                ),
                self.AGENT_NAME,
            )

        logger.info(f"Completion received for {self.AGENT_NAME}: {len(completion.tool_calls)} tool call(s).")
        return completion

    async def dispatch(self, completion: Completion, network: Network) -> AgentResult:
        round_index = len(network.state.results)
        result = AgentResult(
            agent_name=self.AGENT_NAME,
            metrics=AgentMetrics(start_time=datetime.now(), token_usage=completion.usage),
        )

        for text in completion.text_blocks:
            if text.strip() == "":
                continue
            result.output.append(text.rstrip())
            await network.event_bus.publish(
                Event(
                    type=EventType.ASSISTANT_MESSAGE,
                    content=text.rstrip(),
                    metadata=dict(round_index=round_index),
                ),
                self.AGENT_NAME,
            )

        context = ToolContext(network=network, agent=self, round_index=round_index)
        for tool_call in completion.tool_calls:
            before = network.state.get()
            try:
                record = await handle_tool_call(
                    tool_call, self._tools, context, timeout=network.tool_timeout
                )
            except Exception as e:
                logger.warning(f"Tool {tool_call.tool_name} raised during {self.AGENT_NAME}'s round: {e}")
                result.tool_calls.append(ToolCallRecord(
                    call_id=tool_call.call_id,
                    tool_name=tool_call.tool_name,
                    tool_args=tool_call.tool_args,
                    error_type=ToolErrorType.RUNTIME,
                    result=ToolResult(
                        tool_name=tool_call.tool_name,
                        success=False,
                        errors=f"Tool runtime error: {type(e).__name__}: {e}",
                    ),
                ))
                result.metrics.tool_calls = len(result.tool_calls)
                result.metrics.end_time = datetime.now()
                raise RoundError(self.AGENT_NAME, e, result=result) from e

            result.tool_calls.append(record)
            await self._publish_state_changes(before, network, round_index)

        result.metrics.tool_calls = len(result.tool_calls)
        result.metrics.end_time = datetime.now()
        return result

    async def round(self, network: Network) -> AgentResult:
        completion = await self.infer(network)
        return await self.dispatch(completion, network)

    async def _publish_state_changes(self, before: dict, network: Network, round_index: int) -> None:
        after = network.state.get()
        changed = sorted(
            k for k in before.keys() | after.keys()
            if before.get(k) != after.get(k)
        )
        if not changed:
            return
        await network.event_bus.publish(
            Event(
                type=EventType.STATE_UPDATE,
                content=f"Updated: {', '.join(changed)}",
                metadata=dict(keys=changed, round_index=round_index),
            ),
            self.AGENT_NAME,
        )
