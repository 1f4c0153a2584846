"""Entity reference scanner.

Step arguments and step contexts are arbitrary JSON-like trees. Any string leaf
that is exactly a UUID (versions 1-5, RFC 4122 variant) is treated as a
reference to an ``Entity``. The scan is shape-agnostic so every argument schema
can be checked.
"""

from __future__ import annotations

import re
from typing import Any, List

ENTITY_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_entity_id(value: Any) -> bool:
    return isinstance(value, str) and ENTITY_ID_PATTERN.match(value) is not None


def extract_entity_references(value: Any) -> List[str]:
    """
    Collect every entity id embedded in a JSON-like value.

    Mapping keys are not scanned, only values. Duplicates are dropped while
    keeping first-seen order.

    Args:
        value: Any combination of dicts, lists, tuples, strings and scalars.

    Returns:
        The referenced entity ids.
    """
    found: List[str] = []
    seen: set[str] = set()
    stack: List[Any] = [value]
    while stack:
        node = stack.pop()
        if isinstance(node, str):
            if is_entity_id(node) and node not in seen:
                seen.add(node)
                found.append(node)
        elif isinstance(node, dict):
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, (list, tuple)):
            stack.extend(reversed(node))
    return found
