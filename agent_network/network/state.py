# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""The shared state document and result log of a single network run."""

import copy
import logging

from typing import Any, Mapping, Sequence

from ..types.agent_types import AgentResult

logger = logging.getLogger(__name__)


class NetworkState:
    """
    Task-scoped key/value data that every agent and tool of one network can
    see, plus the append-only log of completed rounds.

    Reads through ``get`` return deep copies, so a snapshot handed to a gate
    or an instruction template can never write back into the document. The
    completion flag (``completion_key``) is monotonic: once true it cannot be
    cleared.
    """

    def __init__(self, data: Mapping[str, Any] | None = None, completion_key: str = "done"):
        self.completion_key = completion_key
        self._data: dict[str, Any] = copy.deepcopy(dict(data or {}))
        self._results: list[AgentResult] = []

    def get(self) -> dict[str, Any]:
        """A snapshot of the current data."""
        return copy.deepcopy(self._data)

    def read(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if key == self.completion_key and self.done and not value:
            raise ValueError(
                f"The completion flag '{key}' has been set and cannot be cleared"
            )
        logger.debug(f"State update: {key}")
        self._data[key] = value

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)

    @property
    def done(self) -> bool:
        return bool(self._data.get(self.completion_key, False))

    @property
    def results(self) -> Sequence[AgentResult]:
        """The result log. A tuple, so callers cannot reorder or prune it."""
        return tuple(self._results)

    def append_result(self, result: AgentResult) -> AgentResult:
        """Add a completed round to the log, stamping its position."""
        result.round_index = len(self._results)
        self._results.append(result)
        return result

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"NetworkState(keys={sorted(self._data)}, done={self.done}, results={len(self._results)})"
