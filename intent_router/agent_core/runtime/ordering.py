"""Execution ordering for plan steps.

``topological_order`` computes a deterministic order with a depth-first walk
over the ``deps`` relation: visiting a step first visits all of its
dependencies. A step revisited while still on the walk stack means a cycle.

This check is independent of the policy engine's dependency rule; a stored plan
is re-checked here before anything runs.
"""

from __future__ import annotations

from typing import List, Sequence

from ..errors import CircularDependencyError, InvalidDependencyError
from ..schemas.domain import Step


def topological_order(steps: Sequence[Step]) -> List[int]:
    """
    Order step indices so every step follows all of its dependencies.

    Roots are visited in plan order and dependencies in declaration order, so
    the result is deterministic.

    Raises:
        CircularDependencyError: If the dependency graph contains a cycle.
        InvalidDependencyError: If a dependency index is outside the plan.
    """
    total = len(steps)
    order: List[int] = []
    visited: set[int] = set()
    visiting: List[int] = []

    def visit(idx: int) -> None:
        if idx in visited:
            return
        if idx in visiting:
            raise CircularDependencyError(idx, visiting[visiting.index(idx):])
        visiting.append(idx)
        for d in steps[idx].deps:
            if d < 0 or d >= total:
                raise InvalidDependencyError(idx, d, total)
            visit(d)
        visiting.pop()
        visited.add(idx)
        order.append(idx)

    for i in range(total):
        visit(i)
    return order
