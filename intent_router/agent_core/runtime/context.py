"""Per-step context building and capability inheritance helpers."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..policy.references import extract_entity_references
from ..schemas.domain import Entity, Step


def result_key(step_index: int) -> str:
    return f"step_{step_index}_result"


def build_step_context(step: Step, results: Mapping[int, Any]) -> Dict[str, Any]:
    """
    Expose the results of a step's declared dependencies, and nothing else.

    Args:
        step: The step about to run.
        results: Results of the steps executed so far, keyed by step index.

    Returns:
        ``{"step_{d}_result": result}`` for every dependency ``d`` that has a
        stored result.
    """
    return {result_key(d): results[d] for d in step.deps if d in results}


def consumed_entity_ids(step: Step, context: Mapping[str, Any]) -> List[str]:
    """Every entity id found in the step arguments or its built context.

    This over-approximates what the executor actually read.
    """
    return extract_entity_references([step.args, dict(context)])


def inherited_capabilities(consumed: Iterable[Entity]) -> List[str]:
    """Union of the tags of every consumed entity, first-seen order."""
    out: List[str] = []
    for entity in consumed:
        for tag in entity.capabilities:
            if tag not in out:
                out.append(tag)
    return out


def produced_capabilities(inherited: Sequence[str], proposed: Iterable[str], declared: Iterable[str]) -> List[str]:
    """
    Tags for an entity produced by a step.

    The inherited tags are always kept. Tags proposed by the executor are kept
    only if the step declared them.
    """
    declared_set = set(declared)
    out = list(inherited)
    for tag in proposed:
        if tag in declared_set and tag not in out:
            out.append(tag)
    return out
