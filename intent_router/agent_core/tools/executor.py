"""Default executor collaborator.

``ToolExecutor`` resolves a step's operation to a registered ``Tool`` and runs
it. It never raises for tool failures: unknown operations, tool exceptions and
``ok=False`` results are all reported through ``ExecutorResponse.error`` so the
engine records them as a failed step.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Optional

from ..errors import UnknownOperationError
from .base import ExecutorRequest, ExecutorResponse, Tool, ToolContext, ToolDeps

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Name → tool dispatching ``StepExecutor``."""

    def __init__(self, tools: Iterable[Tool] = (), *, deps: Optional[ToolDeps] = None) -> None:
        self._lock = threading.RLock()
        self._tools: Dict[str, Tool] = {}
        self._deps = deps or ToolDeps()
        for tool in tools:
            self.register_tool(tool)

    def register_tool(self, tool: Tool) -> None:
        """Register a tool; an existing tool with the same name is replaced."""
        with self._lock:
            self._tools[tool.name] = tool

    def unregister_tool(self, name: str) -> bool:
        with self._lock:
            return self._tools.pop(name, None) is not None

    def get(self, name: str) -> Tool:
        with self._lock:
            tool = self._tools.get(name)
        if tool is None:
            raise UnknownOperationError(name)
        return tool

    def tools(self) -> List[Tool]:
        with self._lock:
            return [self._tools[name] for name in sorted(self._tools)]

    async def execute_step(self, request: ExecutorRequest) -> ExecutorResponse:
        step = request.step
        try:
            tool = self.get(step.op)
        except UnknownOperationError as e:
            return ExecutorResponse(error=str(e))

        ctx = ToolContext(step=step, step_index=request.step_index, context=dict(request.context), deps=self._deps)
        try:
            res = await tool.run(ctx, args=dict(step.args))
        except Exception as e:
            logger.warning(f"Tool '{tool.name}' raised during step {request.step_index}: {e}", exc_info=True)
            return ExecutorResponse(error=f"Tool execution failed: {e}")

        if not res.ok:
            return ExecutorResponse(result=res.output, error=str(res.output.get("error") or "tool reported failure"))
        return ExecutorResponse(result=res.output, entities=list(res.entities))
