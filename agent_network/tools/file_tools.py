# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
import logging

from pathlib import Path
from pydantic import Field

from .base_tool import BaseTool
from ..types.tool_types import ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

DEFAULT_EXCLUDES = {".git", "__pycache__", ".venv", "node_modules", ".mypy_cache", ".pytest_cache"}


class WorkdirTool(BaseTool):
    """Base class for tools that operate on files under the network's
    ``workdir`` state field."""

    @property
    def workdir(self) -> Path:
        return Path(self.state.read("workdir", ".")).resolve()

    def resolve(self, path: str) -> Path:
        """Resolve a path relative to the workdir, refusing anything that
        escapes it."""
        workdir = self.workdir
        resolved = (workdir / path).resolve()
        if resolved != workdir and workdir not in resolved.parents:
            raise ValueError(f"Path {path} is outside of the work directory {workdir}")
        return resolved

    def relative(self, path: Path) -> str:
        return str(path.relative_to(self.workdir))


def format_with_line_numbers(content: str, start: int = 1) -> str:
    lines = content.splitlines()
    width = len(str(start + len(lines)))
    return "\n".join(f"{i:>{width}} | {line}" for i, line in enumerate(lines, start=start))


class ReadFile(WorkdirTool):
    TOOL_NAME = "read_file"
    TOOL_DESCRIPTION = """Read the contents of a file in the repository.

Paths are relative to the repository root. Only open plain text files; binary
or media files will give unpredictable results.
"""

    path: str = Field(
        ...,
        description="Path of the file to read, relative to the repository root",
    )
    show_line_numbers: bool = Field(
        False,
        description="When True, displays line numbers in the left margin of the file for easier reference.",
    )

    async def run(self) -> ToolResult | None:
        if self.network is None:
            return None
        try:
            path = self.resolve(self.path)
            if not path.is_file():
                return self._error(f"File path: {self.path} does not exist")

            content = path.read_text()
            if self.show_line_numbers:
                content = format_with_line_numbers(content)

            warnings = None
            num_lines = content.count("\n") + 1
            if num_lines > 750:
                warnings = f"This file is {num_lines} lines long. Prefer extract_class_and_fns to navigate large files."
            return self._result(content, warnings=warnings)
        except Exception as e:
            return self._error(str(e))


class ListDirectory(WorkdirTool):
    """Tool to generate a tree view of a directory."""

    TOOL_NAME = "list_directory"
    TOOL_DESCRIPTION = """View the files and sub-directories of a directory in the repository as a tree.

Hidden entries and common build or cache directories are skipped."""

    path: str = Field(
        default=".",
        description="The directory to view, relative to the repository root",
    )
    max_depth: int = Field(
        default=2,
        description="Maximum depth to traverse",
        ge=1,
        le=10,
    )

    def _tree(self, directory: Path, depth: int, prefix: str = "") -> list[str]:
        lines = []
        entries = sorted(
            (e for e in directory.iterdir() if not e.name.startswith(".") and e.name not in DEFAULT_EXCLUDES),
            key=lambda e: (not e.is_dir(), e.name),
        )
        for entry in entries:
            if entry.is_dir():
                lines.append(f"{prefix}{entry.name}/")
                if depth > 1:
                    lines.extend(self._tree(entry, depth - 1, prefix + "  "))
            else:
                lines.append(f"{prefix}{entry.name}")
        return lines

    async def run(self) -> ToolResult | None:
        if self.network is None:
            return None
        try:
            path = self.resolve(self.path)
            if not path.exists():
                return self._error(f"Directory does not exist: {self.path}")
            if not path.is_dir():
                return self._error(f"Path is not a directory: {self.path}")

            tree = self._tree(path, self.max_depth)
            return self._result("\n".join(tree) if tree else "(empty directory)")
        except Exception as e:
            return self._error(str(e))


class OverwriteFile(WorkdirTool):
    """Tool to overwrite an existing file or create a new one with content."""

    TOOL_NAME = "overwrite_file"
    TOOL_DESCRIPTION = """Use this tool when you want to write content verbatim to a file, either overwriting an existing file or creating a new one.

Very important notes:
- The content you provide to this tool will be that file's new content. You must make sure to include absolutely everything you still need
- Do NOT "fold" any code sections because this will cause errors. Instead, write out everything verbatim.
- Prefer replace_class_method for targeted edits to existing Python files.
"""

    path: str = Field(
        ...,
        description="Path of the file to write, relative to the repository root",
    )
    content: str = Field(
        ...,
        description="The full content to write to the file, which will entirely replace any existing content.",
    )

    async def run(self) -> ToolResult | None:
        if self.network is None:
            return None
        try:
            path = self.resolve(self.path)
            existed = path.exists()
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.content)
            logger.info(f"{'Overwrote' if existed else 'Created'} {path}")
            return self._result(
                f"{'Overwrote' if existed else 'Created'} {self.relative(path)} ({len(self.content.splitlines())} lines)"
            )
        except Exception as e:
            return self._error(str(e))
