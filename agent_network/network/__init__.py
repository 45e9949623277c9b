# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from .state import NetworkState
from .network import Network
from .code_writing import create_code_writing_network
from ..types.network_types import NetworkStatus, NetworkOutcome

__all__ = [
    "NetworkState",
    "Network",
    "NetworkStatus",
    "NetworkOutcome",
    "create_code_writing_network",
]
