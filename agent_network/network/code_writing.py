# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""The plan-then-edit network: a planner gated on the absence of a plan, and
an editor gated on its presence that ends the run by calling ``done``."""

from pathlib import Path
from typing import Optional

from .network import Network
from .state import NetworkState
from ..agents.implementations import PlanningAgent, EditingAgent
from ..events import EventBus
from ..llm.providers import BaseProvider
from ..types.llm_types import Model


def create_code_writing_network(
    repo: str,
    issue: str,
    workdir: Path | str = ".",
    provider: Optional[BaseProvider] = None,
    model: Optional[Model] = None,
    temperature: Optional[float] = None,
    max_rounds: Optional[int] = None,
    round_timeout: Optional[float] = None,
    tool_timeout: Optional[float] = None,
    event_bus: Optional[EventBus] = None,
) -> Network:
    """Build a code writing network for one issue.

    The initial state holds the repository name, the issue, the work directory
    the file tools resolve paths against, and an empty plan.
    """
    state = NetworkState(
        dict(
            repo=repo,
            issue=issue,
            workdir=str(Path(workdir).resolve()),
            plan=None,
            done=False,
        )
    )
    return Network(
        agents=[PlanningAgent(temperature=temperature), EditingAgent(temperature=temperature)],
        state=state,
        provider=provider,
        input=issue,
        model=model,
        max_rounds=max_rounds,
        round_timeout=round_timeout,
        tool_timeout=tool_timeout,
        event_bus=event_bus,
        name="code_writing",
    )
