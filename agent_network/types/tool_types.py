# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
import os
import json

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Optional
from pydantic import BaseModel, ConfigDict, Field


class ToolResult(BaseModel):
    """Represents the result of a tool execution."""

    tool_name: str
    success: bool
    duration: float = 0.0  # on tool error paths, duration is often 0
    output: dict[str, Any] | list | str | None = None
    warnings: str | None = None
    errors: str | None = None
    invocation_id: str = Field(default_factory=lambda: os.urandom(4).hex())

    def __str__(self):
        str_output = self.output if isinstance(self.output, str) else None
        if isinstance(self.output, (dict, list)):
            str_output = json.dumps(self.output, indent=2, default=str)

        tool_response_str = "<TOOL_RESPONSE>"
        tool_response_str += (
            f"\n<STATUS>{'SUCCESS' if self.success else 'FAILURE'}</STATUS>"
        )
        if str_output is not None:
            tool_response_str += f"\n<OUTPUT>{str_output}</OUTPUT>"
        if self.warnings is not None:
            tool_response_str += f"\n<WARNINGS>{self.warnings}</WARNINGS>"
        if self.errors is not None:
            tool_response_str += f"\n<ERRORS>{self.errors}</ERRORS>"
        tool_response_str += "\n</TOOL_RESPONSE>"

        return tool_response_str


class ToolErrorType(str, Enum):
    """Why a requested tool call did not produce a normal result."""

    VALIDATION = "validation"  # arguments failed the tool's schema
    UNAVAILABLE = "unavailable"  # not in the calling agent's capability set
    RUNTIME = "runtime"  # the handler raised


class ToolCallRecord(BaseModel):
    """One tool call made during a round: what was asked, and what came back.

    A record whose ``result`` is None and whose ``error_type`` is None is a
    call whose handler returned no value.
    """

    call_id: str
    tool_name: str
    tool_args: dict[str, Any] = Field(default_factory=dict)
    result: Optional[ToolResult] = None
    error_type: Optional[ToolErrorType] = None

    @property
    def succeeded(self) -> bool:
        return self.error_type is None and (self.result is None or self.result.success)


class ToolInterface(BaseModel, ABC):
    """Abstract interface for all tools"""

    # Class variables
    TOOL_NAME: ClassVar[str]
    TOOL_DESCRIPTION: ClassVar[str]

    model_config = ConfigDict(extra="forbid")

    @abstractmethod
    async def run(self) -> ToolResult | None:
        """Execute the tool's functionality"""
        pass

    @classmethod
    @abstractmethod
    def to_native_schema(cls) -> dict:
        """The tool's name, description and argument schema, in the function
        calling format the providers consume."""
        pass
