# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
A module of Agent tools
"""

from .base_tool import BaseTool, FunctionTool, ToolContext, create_tool, handle_tool_call
from .network_tools import SubmitPlan, Done
from .file_tools import ReadFile, ListDirectory, OverwriteFile
from .code_tools import ExtractClassAndFns, ReplaceClassMethod

toolkits: dict[str, list[type[BaseTool]]] = dict(
    exploration=[
        ListDirectory,
        ReadFile,
        ExtractClassAndFns,
    ],
    editing=[
        ExtractClassAndFns,
        ReplaceClassMethod,
        ReadFile,
        OverwriteFile,
    ],
)

__all__ = [
    "BaseTool",
    "FunctionTool",
    "ToolContext",
    "create_tool",
    "handle_tool_call",
    "SubmitPlan",
    "Done",
    "ReadFile",
    "ListDirectory",
    "OverwriteFile",
    "ExtractClassAndFns",
    "ReplaceClassMethod",
    "toolkits",
]
