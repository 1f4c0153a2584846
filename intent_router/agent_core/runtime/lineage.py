"""Replay of a plan's produces/consumes graph from its event log."""

from __future__ import annotations

from typing import Dict, List, Sequence

from ..schemas.domain import Event, LineageEdge, PlanLineage


def replay_lineage(plan_id: str, events: Sequence[Event]) -> PlanLineage:
    """
    Re-derive the entity lineage of a plan.

    Events are replayed in ``sequence`` order. Each produced entity is mapped to
    the step that produced it. Each consumed entity yields an edge from its
    producing step (None when it predates the plan) to the consuming step.

    Args:
        plan_id: The plan the events belong to.
        events: The plan's events, in any order.
    """
    producers: Dict[str, int] = {}
    consumers: Dict[str, List[int]] = {}
    edges: List[LineageEdge] = []
    failed_step = None

    for event in sorted(events, key=lambda e: e.sequence):
        if event.plan_id != plan_id:
            continue
        if event.error is not None:
            failed_step = event.step_index
            continue
        for entity_id in event.consumes:
            consumers.setdefault(entity_id, []).append(event.step_index)
            edges.append(LineageEdge(entity_id=entity_id, from_step=producers.get(entity_id), to_step=event.step_index))
        for entity_id in event.produces:
            producers[entity_id] = event.step_index

    return PlanLineage(plan_id=plan_id, producers=producers, consumers=consumers, edges=edges, failed_step=failed_step)
