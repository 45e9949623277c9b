# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Gated agent networks: agents that take turns on a shared state document until
one of them signals completion.
"""

from .errors import NetworkError, RoundError, StallError, RoundLimitError, ValidationError
from .network import (
    Network,
    NetworkState,
    NetworkStatus,
    NetworkOutcome,
    create_code_writing_network,
)
from .agents import BaseAgent, PlanningAgent, EditingAgent
from .tools import BaseTool, ToolContext, create_tool

__all__ = [
    "Network",
    "NetworkState",
    "NetworkStatus",
    "NetworkOutcome",
    "create_code_writing_network",
    "BaseAgent",
    "PlanningAgent",
    "EditingAgent",
    "BaseTool",
    "ToolContext",
    "create_tool",
    "NetworkError",
    "RoundError",
    "StallError",
    "RoundLimitError",
    "ValidationError",
]
