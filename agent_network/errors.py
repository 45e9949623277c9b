# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Errors raised by the network.

Tool argument validation failures are pydantic's own ``ValidationError``; they
are recorded against the offending tool call and never end a run. Everything
else in here ends the run it happens in.
"""

from typing import Any, Optional
from pydantic import ValidationError

__all__ = [
    "ValidationError",
    "NetworkError",
    "RoundError",
    "StallError",
    "RoundLimitError",
]


class NetworkError(Exception):
    """Base class for errors that end a network run."""


class RoundError(NetworkError):
    """An agent round could not be completed: history projection, instruction
    rendering, the inference call or a tool handler failed.

    When a tool handler fails part way through a round, ``result`` holds the
    partial round (the calls applied so far, and the failing one) so that it
    can still be logged.
    """

    def __init__(
        self,
        agent_name: str,
        cause: Optional[BaseException] = None,
        message: str | None = None,
        result: Any = None,
    ):
        self.agent_name = agent_name
        self.cause = cause
        self.result = result
        if message is None:
            message = f"Round for agent '{agent_name}' failed"
            if cause is not None:
                message += f": {type(cause).__name__}: {cause}"
        super().__init__(message)


class StallError(NetworkError):
    """No agent is eligible and the completion flag is not set, so the network
    cannot make progress. This points at the agents' gates, not at a fault
    during execution."""

    def __init__(self, state: dict[str, Any]):
        self.state = state
        super().__init__(
            f"No eligible agent for the current state (keys: {sorted(state.keys())})"
        )


class RoundLimitError(NetworkError):
    """The caller-supplied bound on the number of rounds was reached before the
    completion flag was set."""

    def __init__(self, max_rounds: int):
        self.max_rounds = max_rounds
        super().__init__(f"Reached the limit of {max_rounds} rounds without completing")
