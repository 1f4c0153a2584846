from __future__ import annotations

from intent_router.agent_core.policy import extract_entity_references, is_entity_id

A = "123e4567-e89b-42d3-a456-426614174000"
B = "9F1C2B3A-0D4E-4F5A-8B6C-7D8E9F0A1B2C"


def test_is_entity_id() -> None:
    assert is_entity_id(A)
    assert is_entity_id(B)
    assert not is_entity_id("not-a-uuid")
    assert not is_entity_id(f"prefix {A}")
    assert not is_entity_id("123e4567-e89b-02d3-a456-426614174000")  # version 0
    assert not is_entity_id(123)


def test_extract_walks_nested_values_in_order() -> None:
    value = {"a": A, "b": [{"c": B}, "plain"], "d": (A, 3, None)}
    assert extract_entity_references(value) == [A, B]


def test_extract_ignores_mapping_keys() -> None:
    assert extract_entity_references({A: "value"}) == []


def test_extract_scalars() -> None:
    assert extract_entity_references(A) == [A]
    assert extract_entity_references(42) == []
    assert extract_entity_references(None) == []
