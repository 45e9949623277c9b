# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Planning agent: explores the repository and submits a plan."""

from typing import Any

from ..base_agent import BaseAgent
from ...tools import toolkits
from ...tools.network_tools import SubmitPlan


class PlanningAgent(BaseAgent):
    """
    Eligible only while no plan has been submitted. Its ``submit_plan`` tool
    writes the ``plan`` field, which closes its own gate and opens the
    editor's.
    """

    AGENT_NAME = "Planner"

    AGENT_DESCRIPTION = """Explores the repository to understand an issue and writes a step by step plan for fixing it. Does not edit any files."""

    SYSTEM_PROMPT = """You are an expert software engineer planning a fix for an issue in the {repo} repository.

Your job is to understand the issue and the code involved, and then to write a plan that another engineer will carry out. You cannot edit files yourself.

Your methodology:
1. Read the issue carefully and identify what behaviour is wrong or missing
2. Explore the repository layout with list_directory
3. Use extract_class_and_fns to locate the relevant classes and functions, and read_file to inspect them
4. Identify the root cause, not just the symptom
5. Call submit_plan with your analysis, an ordered list of concrete steps, and the files that need to change

Remember:
- Each step should name the file and the class or function it touches
- Keep the plan minimal: change only what is needed to resolve the issue
- You must finish by calling submit_plan
"""

    AVAILABLE_TOOLS = [*toolkits["exploration"], SubmitPlan]

    def is_eligible(self, state: dict[str, Any]) -> bool:
        return state.get("plan") is None
