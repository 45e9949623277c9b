# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from .agent_types import AgentResult


class NetworkStatus(str, Enum):
    """Possible states of a network run."""

    SELECTING = "selecting"
    RUNNING = "running"
    TERMINATED = "terminated"  # the completion flag was set
    FAILED = "failed"  # a round failed
    STALLED = "stalled"  # no agent eligible, completion flag unset

    @property
    def is_terminal(self) -> bool:
        return self in (
            NetworkStatus.TERMINATED,
            NetworkStatus.FAILED,
            NetworkStatus.STALLED,
        )


class NetworkOutcome(BaseModel):
    """
    What a caller gets back from a network run, whatever the ending: the
    terminal status, the final state snapshot and the full result log.
    """

    status: NetworkStatus
    state: dict[str, Any] = Field(default_factory=dict)
    results: list[AgentResult] = Field(default_factory=list)
    error: Optional[Exception] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def succeeded(self) -> bool:
        return self.status == NetworkStatus.TERMINATED

    @property
    def rounds(self) -> int:
        return len(self.results)

    def __str__(self) -> str:
        parts = [f"Network finished with status: {self.status.value} after {self.rounds} round(s)"]
        if self.error is not None:
            parts.append(f"Cause: {type(self.error).__name__}: {self.error}")
        return "\n".join(parts)
