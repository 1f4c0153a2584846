from __future__ import annotations

from intent_router.agent_core.runtime import replay_lineage
from intent_router.agent_core.schemas.domain import Event, LineageEdge

DOC = "123e4567-e89b-42d3-a456-426614174000"
SRC = "9f1c2b3a-0d4e-4f5a-8b6c-7d8e9f0a1b2c"


def test_replay_builds_producers_consumers_and_edges() -> None:
    events = [
        Event(plan_id="p", step_index=1, sequence=1, op="send_message", consumes=[DOC]),
        Event(plan_id="p", step_index=0, sequence=0, op="create_document", consumes=[SRC], produces=[DOC]),
        Event(plan_id="other", step_index=0, sequence=0, op="x", produces=["ignored"]),
    ]
    lineage = replay_lineage("p", events)

    assert lineage.producers == {DOC: 0}
    assert lineage.consumers == {SRC: [0], DOC: [1]}
    assert lineage.edges == [
        LineageEdge(entity_id=SRC, from_step=None, to_step=0),
        LineageEdge(entity_id=DOC, from_step=0, to_step=1),
    ]
    assert lineage.failed_step is None


def test_replay_records_failed_step() -> None:
    events = [
        Event(plan_id="p", step_index=0, sequence=0, op="create_document", produces=[DOC]),
        Event(plan_id="p", step_index=1, sequence=1, op="send_message", error="boom"),
    ]
    lineage = replay_lineage("p", events)
    assert lineage.failed_step == 1
    assert lineage.consumers == {}
