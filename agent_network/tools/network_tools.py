# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Tools that write the progress markers other agents are gated on."""

import logging

from pydantic import Field

from .base_tool import BaseTool
from ..types.tool_types import ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class SubmitPlan(BaseTool):
    """Records the plan that enables the editing phase."""

    TOOL_NAME = "submit_plan"
    TOOL_DESCRIPTION = """Save the plan for resolving the issue.

Once you have explored the repository and understand what needs to change, use
this tool to record an ordered list of concrete steps and the files that will
need to be edited. Submitting a plan ends the planning phase: the editor will
carry the plan out, so make each step specific enough to act on without
further exploration.
"""

    thoughts: str = Field(
        ...,
        description="Your analysis of the issue and of the root cause",
    )
    steps: list[str] = Field(
        ...,
        description="The ordered list of concrete steps that will fix the issue",
        min_length=1,
    )
    files: list[str] = Field(
        default_factory=list,
        description="Paths, relative to the repository root, of the files that need to change",
    )

    async def run(self) -> ToolResult | None:
        if self.network is None:
            return None

        steps = [s.strip() for s in self.steps if s.strip()]
        if not steps:
            return self._error("The plan must contain at least one non-empty step")

        plan = dict(thoughts=self.thoughts, steps=steps, files=self.files)
        self.network.state.set("plan", plan)
        logger.info(f"Plan submitted with {len(steps)} step(s)")

        return self._result(f"Plan saved with {len(steps)} step(s)")


class Done(BaseTool):
    """Sets the network's completion flag."""

    TOOL_NAME = "done"
    TOOL_DESCRIPTION = """Saves the current project and finishes editing.

Only call this once the files have been edited and you are confident that the
updated code resolves the issue. This ends the task for every agent.
"""

    summary: str = Field(
        default="",
        description="A short summary of the changes that were made",
    )

    async def run(self) -> ToolResult | None:
        if self.network is None:
            return None

        state = self.network.state
        if self.summary:
            state.set("summary", self.summary)
        state.set(state.completion_key, True)

        return self._result("Done editing")
