# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional, Sequence, TYPE_CHECKING
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from .llm_types import TokenUsage, Model
from .tool_types import ToolCallRecord

if TYPE_CHECKING:
    from ..llm.base import Message, Completion
    from ..network.network import Network


class AgentMetrics(BaseModel):
    """Metrics about one agent round."""

    start_time: datetime
    end_time: Optional[datetime] = None
    token_usage: TokenUsage = TokenUsage()
    tool_calls: int = 0

    @property
    def duration_seconds(self) -> Optional[float]:
        """Calculate execution duration if completed."""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None


class AgentResult(BaseModel):
    """
    One entry of the network's result log: everything a single agent round
    produced.

    The text outputs and tool call records are kept in the order the model
    emitted them; replaying them is how an agent rebuilds its own history in
    later rounds.
    """

    agent_name: str
    output: list[str] = Field(default_factory=list)
    tool_calls: list[ToolCallRecord] = Field(default_factory=list)
    metrics: AgentMetrics = Field(
        default_factory=lambda: AgentMetrics(start_time=datetime.now())
    )
    round_index: int = -1

    @property
    def text(self) -> str:
        return "\n".join(self.output)

    def __str__(self) -> str:
        parts = [
            f"<AGENT_RESULT agent='{self.agent_name}' round='{self.round_index}'>",
        ]
        if self.output:
            parts.append(f"<OUTPUT>\n{self.text}\n</OUTPUT>")
        for record in self.tool_calls:
            status = "ok" if record.succeeded else (record.error_type or "failed")
            parts.append(f"<TOOL_CALL name='{record.tool_name}' status='{status}'/>")
        parts.append("</AGENT_RESULT>")
        return "\n".join(parts)


class AgentInterface(BaseModel, ABC):
    """
    Abstract interface for all agents in a network.

    An agent is a gate over the shared state, a view over the result log, an
    instruction template and an ordered capability set. Agents never talk to
    each other directly; they only see the shared state and their own past
    rounds.
    """

    # Required class-level attributes
    AGENT_NAME: ClassVar[str]
    AGENT_DESCRIPTION: ClassVar[str]
    SYSTEM_PROMPT: ClassVar[str]

    # Optional class-level configuration
    AVAILABLE_TOOLS: ClassVar[list[type]] = []
    MODEL: ClassVar[Model | None] = None
    TEMPERATURE: ClassVar[float] = 0.666
    MAX_TOKENS: ClassVar[int | None] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @abstractmethod
    def is_eligible(self, state: dict[str, Any]) -> bool:
        """
        The activation predicate. Must be a pure function of the state
        snapshot it is given.
        """
        pass

    @abstractmethod
    def project_history(self, results: Sequence[AgentResult]) -> list[Message]:
        """
        Rebuild this agent's conversation from the result log, keeping only
        the rounds this agent ran.
        """
        pass

    @abstractmethod
    def render_instructions(self, state: dict[str, Any]) -> str:
        """
        Build the system instructions for the next round from the current
        state snapshot.
        """
        pass

    @abstractmethod
    async def infer(self, network: Network) -> Completion:
        """Project history, render instructions and run one inference call."""
        pass

    @abstractmethod
    async def dispatch(self, completion: Completion, network: Network) -> AgentResult:
        """Apply the tool calls requested in a completion, in order."""
        pass

    @abstractmethod
    async def round(self, network: Network) -> AgentResult:
        """Run a complete round for this agent against a network."""
        pass
