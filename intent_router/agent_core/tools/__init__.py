"""Executor collaborator and tools.

 - ``StepExecutor``: protocol the plan execution engine calls for each step.
 - ``ToolExecutor``: default executor dispatching ``step.op`` to a ``Tool``.
 - ``default_tools``: built-in tools (documents, messages, search, analysis).
 """

from .base import (
    ExecutorRequest,
    ExecutorResponse,
    StepExecutor,
    Tool,
    ToolContext,
    ToolDeps,
    ToolResult,
)
from .builtin import default_tools
from .executor import ToolExecutor

__all__ = [
    "ExecutorRequest",
    "ExecutorResponse",
    "StepExecutor",
    "Tool",
    "ToolContext",
    "ToolDeps",
    "ToolExecutor",
    "ToolResult",
    "default_tools",
]
