# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Structure-aware tools for navigating and editing Python source files."""

import ast
import logging
import textwrap

from pathlib import Path
from pydantic import Field

from .file_tools import WorkdirTool
from ..types.tool_types import ToolResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef


def _span(node: ast.AST) -> tuple[int, int]:
    """First and last line of a definition, decorators included."""
    start = node.lineno
    for decorator in getattr(node, "decorator_list", []):
        start = min(start, decorator.lineno)
    return start, node.end_lineno or node.lineno


def outline(source: str) -> dict:
    """The top-level classes (with their methods) and functions of a module."""
    tree = ast.parse(source)
    classes, functions = [], []
    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            start, end = _span(node)
            methods = [
                dict(name=child.name, start_line=_span(child)[0], end_line=_span(child)[1])
                for child in node.body
                if isinstance(child, FunctionNode)
            ]
            classes.append(dict(name=node.name, start_line=start, end_line=end, methods=methods))
        elif isinstance(node, FunctionNode):
            start, end = _span(node)
            functions.append(dict(name=node.name, start_line=start, end_line=end))
    return dict(classes=classes, functions=functions)


def find_function(tree: ast.Module, class_name: str, function_name: str) -> FunctionNode | None:
    """Locate a method of a top-level class, or a module-level function when
    ``class_name`` is empty."""
    body = tree.body
    if class_name:
        cls = next(
            (n for n in tree.body if isinstance(n, ast.ClassDef) and n.name == class_name),
            None,
        )
        if cls is None:
            return None
        body = cls.body
    return next(
        (n for n in body if isinstance(n, FunctionNode) and n.name == function_name),
        None,
    )


def replace_function(source: str, class_name: str, function_name: str, code: str) -> str:
    """Return ``source`` with one function definition replaced by ``code``.

    The new code is re-indented to the column of the definition it replaces.
    Raises LookupError if the function does not exist and SyntaxError if the
    result does not parse.
    """
    tree = ast.parse(source)
    node = find_function(tree, class_name, function_name)
    if node is None:
        owner = f"class {class_name}" if class_name else "module scope"
        raise LookupError(f"Function {function_name} not found in {owner}")

    start, end = _span(node)
    indent = " " * node.col_offset
    new_block = textwrap.indent(textwrap.dedent(code).strip("\n"), indent) + "\n"

    lines = source.splitlines(keepends=True)
    updated = "".join(lines[: start - 1]) + new_block + "".join(lines[end:])
    ast.parse(updated)
    return updated


class ExtractClassAndFns(WorkdirTool):
    TOOL_NAME = "extract_class_and_fns"
    TOOL_DESCRIPTION = """Return all classes (with their methods) and top-level functions defined in a Python file, with their line ranges.

Use this to find the definitions you need before reading or editing them."""

    path: str = Field(
        ...,
        description="Path of the Python file, relative to the repository root",
    )

    async def run(self) -> ToolResult | None:
        if self.network is None:
            return None
        try:
            path = self.resolve(self.path)
            if not path.is_file():
                return self._error(f"File path: {self.path} does not exist")
            return self._result(outline(path.read_text()))
        except SyntaxError as e:
            return self._error(f"Could not parse {self.path}: {e}")
        except Exception as e:
            return self._error(str(e))


class ReplaceClassMethod(WorkdirTool):
    TOOL_NAME = "replace_class_method"
    TOOL_DESCRIPTION = """Replace a method of a class (or a top-level function) in a Python file with new code.

The code must be the complete new definition, including the `def` line and any
decorators. Indentation is adjusted automatically. To replace a top-level
function, pass an empty class_name. The edit is rejected if the resulting file
does not parse.
"""

    path: str = Field(
        ...,
        description="Path of the Python file, relative to the repository root",
    )
    class_name: str = Field(
        ...,
        description="The class containing the method, or an empty string for a top-level function",
    )
    function_name: str = Field(
        ...,
        description="The name of the method or function to replace",
    )
    code: str = Field(
        ...,
        description="The complete new definition of the method or function",
        min_length=1,
    )

    async def run(self) -> ToolResult | None:
        if self.network is None:
            return None
        try:
            path: Path = self.resolve(self.path)
            if not path.is_file():
                return self._error(f"File path: {self.path} does not exist")

            updated = replace_function(path.read_text(), self.class_name, self.function_name, self.code)
            path.write_text(updated)

            target = f"{self.class_name}.{self.function_name}" if self.class_name else self.function_name
            logger.info(f"Replaced {target} in {path}")
            return self._result(f"Replaced {target} in {self.path}")
        except LookupError as e:
            return self._error(str(e))
        except SyntaxError as e:
            return self._error(f"The edit was not applied because the result does not parse: {e}")
        except Exception as e:
            return self._error(str(e))
