# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
The network orchestrator.

A network owns one shared state document, its result log and an ordered set
of agents. Each step selects the first eligible agent, runs one round for it
and appends the result; the run ends when a tool sets the completion flag, when
no agent is eligible, or when a round fails.

States::

    SELECTING --(agent eligible)--> RUNNING --(round appended)--> SELECTING
    SELECTING --(completion flag)--> TERMINATED
    SELECTING --(no eligible agent)--> STALLED
    RUNNING --(round error)--> FAILED
"""

import asyncio
import logging

from typing import Any, Mapping, Optional, Sequence

from .state import NetworkState
from ..agents.base_agent import BaseAgent
from ..errors import RoundError, StallError, RoundLimitError
from ..events import EventBus
from ..llm.providers import BaseProvider
from ..types.agent_types import AgentResult
from ..types.event_types import EventType, Event
from ..types.llm_types import Model
from ..types.network_types import NetworkStatus, NetworkOutcome

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class Network:
    """
    Args:
        agents: The agents, in registration order. Selection picks the first
            eligible one, so order is the tie-break.
        state: A ``NetworkState``, or a plain mapping of task inputs to build
            one from.
        provider: The inference provider the agents' rounds call.
        input: The task input given to every agent as its opening message.
        model: Default model for agents that do not set their own.
        max_rounds: Optional safety bound on the number of rounds.
        round_timeout: Optional bound, in seconds, on each inference call.
        tool_timeout: Optional bound, in seconds, on each tool call.
        event_bus: Where events are published; a fresh bus by default.
        name: Publisher name for network level events.
    """

    def __init__(
        self,
        agents: Sequence[BaseAgent],
        state: NetworkState | Mapping[str, Any] | None = None,
        provider: Optional[BaseProvider] = None,
        input: str = "",
        model: Optional[Model] = None,
        max_rounds: Optional[int] = None,
        round_timeout: Optional[float] = None,
        tool_timeout: Optional[float] = None,
        event_bus: Optional[EventBus] = None,
        name: str = "network",
    ):
        names = [agent.AGENT_NAME for agent in agents]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate agent names: {', '.join(duplicates)}")
        if max_rounds is not None and max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")

        self.agents: list[BaseAgent] = list(agents)
        self.state = state if isinstance(state, NetworkState) else NetworkState(state)
        self.provider = provider
        self.input = input
        self.model = model
        self.max_rounds = max_rounds
        self.round_timeout = round_timeout
        self.tool_timeout = tool_timeout
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self.name = name

        self.status = NetworkStatus.SELECTING
        self.error: Optional[Exception] = None
        self._started = False

    # Selection -----------------------------------------------------------

    def select_agent(self) -> Optional[BaseAgent]:
        """The first agent, in registration order, whose gate admits the
        current state. A gate that raises counts as closed."""
        for agent in self.agents:
            try:
                eligible = agent.is_eligible(self.state.get())
            except Exception as e:
                logger.warning(f"Eligibility check for {agent.AGENT_NAME} raised, treating as ineligible: {e}")
                continue
            if eligible:
                return agent
        return None

    # State machine -------------------------------------------------------

    async def step(self) -> NetworkStatus:
        """Advance the network by one transition and return the new status."""
        if self.status.is_terminal:
            return self.status

        if self.state.done:
            return await self._finish(NetworkStatus.TERMINATED)

        if self.max_rounds is not None and len(self.state.results) >= self.max_rounds:
            return await self._finish(NetworkStatus.FAILED, RoundLimitError(self.max_rounds))

        agent = self.select_agent()
        if agent is None:
            return await self._finish(NetworkStatus.STALLED, StallError(self.state.get()))

        self.status = NetworkStatus.RUNNING
        round_index = len(self.state.results)
        logger.info(f"Round {round_index}: running {agent.AGENT_NAME}")
        await self._publish(EventType.AGENT_SELECTED, agent.AGENT_NAME, round_index=round_index)

        try:
            result = await self._run_round(agent)
        except RoundError as e:
            return await self._finish(NetworkStatus.FAILED, e)
        except asyncio.CancelledError:
            self.status = NetworkStatus.SELECTING
            raise
        except Exception as e:
            return await self._finish(NetworkStatus.FAILED, RoundError(agent.AGENT_NAME, e))

        try:
            await self._publish(
                EventType.ROUND_COMPLETE,
                str(result),
                agent_result=result,
                round_index=result.round_index,
            )
        except asyncio.CancelledError:
            self.status = NetworkStatus.SELECTING
            raise

        if self.state.done:
            return await self._finish(NetworkStatus.TERMINATED)
        self.status = NetworkStatus.SELECTING
        return self.status

    async def run(self) -> NetworkOutcome:
        """Step the network until it reaches a terminal status.

        Round failures, stalls and the round limit are reported in the
        outcome rather than raised. Cancellation propagates once the state is
        consistent.
        """
        if not self._started:
            self._started = True
            logger.info(f"Starting {self.name} with agents: {', '.join(a.AGENT_NAME for a in self.agents)}")
            await self._publish(EventType.NETWORK_START, self.input, state=self.state.get())

        while not self.status.is_terminal:
            await self.step()
        return self.outcome()

    def outcome(self) -> NetworkOutcome:
        return NetworkOutcome(
            status=self.status,
            state=self.state.get(),
            results=list(self.state.results),
            error=self.error,
        )

    # Internals -----------------------------------------------------------

    async def _run_round(self, agent: BaseAgent) -> AgentResult:
        """
        Inference may be cancelled freely: nothing has been applied yet.
        Once tool calls start being applied, the rest of the round runs
        shielded, and a cancelled caller waits for it to land in the log
        before the cancellation propagates.
        """
        completion = await agent.infer(self)

        apply = asyncio.ensure_future(self._apply(agent, completion))
        try:
            return await asyncio.shield(apply)
        except asyncio.CancelledError:
            if not apply.done():
                logger.info(f"Cancelled during {agent.AGENT_NAME}'s tool calls; finishing the round first")
            # Repeated cancels must not reach the apply task
            while not apply.done():
                try:
                    await asyncio.shield(apply)
                except asyncio.CancelledError:
                    continue
                except Exception as e:
                    logger.warning(f"{agent.AGENT_NAME}'s round failed while its cancellation was pending: {e}")
            raise

    async def _apply(self, agent: BaseAgent, completion) -> AgentResult:
        try:
            result = await agent.dispatch(completion, self)
        except RoundError as e:
            if isinstance(e.result, AgentResult):
                self.state.append_result(e.result)
            raise
        return self.state.append_result(result)

    async def _finish(self, status: NetworkStatus, error: Optional[Exception] = None) -> NetworkStatus:
        self.status = status
        self.error = error

        if error is not None:
            logger.error(f"{self.name} {status.value}: {error}")
            await self._publish(
                EventType.APPLICATION_ERROR,
                f"{type(error).__name__}: {error}",
                error=error,
            )
        else:
            logger.info(f"{self.name} {status.value} after {len(self.state.results)} round(s)")

        await self._publish(
            EventType.NETWORK_COMPLETE,
            status.value,
            status=status,
            rounds=len(self.state.results),
        )
        return status

    async def _publish(self, event_type: EventType, content: Any, **metadata) -> None:
        await self.event_bus.publish(
            Event(type=event_type, content=content, metadata=metadata),
            self.name,
        )

    def __repr__(self) -> str:
        return f"Network(name={self.name!r}, status={self.status.value}, agents={[a.AGENT_NAME for a in self.agents]})"
