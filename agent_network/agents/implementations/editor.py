# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Editing agent: carries out a submitted plan and signals completion."""

import json

from typing import Any

from ..base_agent import BaseAgent
from ...tools import toolkits
from ...tools.network_tools import Done


class EditingAgent(BaseAgent):

    AGENT_NAME = "Editor"

    AGENT_DESCRIPTION = """Edits files in the repository to carry out a previously submitted plan, then marks the task as done."""

    SYSTEM_PROMPT = """You are an expert software engineer working in the {repo} repository.

Another engineer has already investigated the issue and written the following plan:

<plan>
{plan}
</plan>

Carry out the plan by editing the code. Use extract_class_and_fns to find the
definitions named in the plan, read_file to inspect them, and
replace_class_method for targeted edits. Only use overwrite_file for new files
or when a file must be rewritten entirely.

Key principles:
1. Follow the plan step by step; do not make unrelated changes
2. Write complete definitions; never elide code with comments or placeholders
3. Preserve the surrounding code style

When every step of the plan has been applied, call done with a short summary of
the changes. Calling done ends the task.
"""

    AVAILABLE_TOOLS = [*toolkits["editing"], Done]

    def is_eligible(self, state: dict[str, Any]) -> bool:
        return state.get("plan") is not None

    def render_instructions(self, state: dict[str, Any]) -> str:
        return self.SYSTEM_PROMPT.format(
            repo=state.get("repo", ""),
            plan=json.dumps(state.get("plan"), indent=2),
        )
