"""Operation requirement map.

Maps an operation name (the verb a step performs) to the tool capabilities it
requires. Unknown operations require nothing, which keeps side-effect free
operations such as ``analyze_content`` usable without any declaration.

Tool providers discovered at runtime register their tools here; the last
registration for a name wins.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_OPERATION_REQUIREMENTS: Mapping[str, tuple[str, ...]] = {
    "fetch_data": ("READ_FILE", "READ_DATABASE"),
    "search_entities": ("READ_DATABASE",),
    "create_document": ("WRITE_FILE",),
    "analyze_content": (),
    "transform_data": (),
    "send_message": ("SEND_EMAIL",),
    "send_notification": ("SEND_WEBHOOK",),
    "send_sms": ("SEND_SMS",),
    "read_file": ("READ_FILE",),
    "write_file": ("WRITE_FILE",),
    "list_files": ("LIST_FILES",),
    "delete_file": ("DELETE_FILE",),
    "http_request": ("HTTP_REQUEST",),
    "fetch_url": ("FETCH_URL",),
    "search_web": ("SEARCH_WEB",),
    "execute_command": ("EXECUTE_COMMAND",),
    "schedule_task": ("SCHEDULE_TASK",),
    "query_database": ("READ_DATABASE",),
    "update_database": ("WRITE_DATABASE",),
}


class OperationRequirementMap:
    """Thread-safe ``operation -> required tool capabilities`` lookup."""

    def __init__(self, entries: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        self._lock = threading.RLock()
        self._entries: Dict[str, frozenset[str]] = {}
        for op, caps in (entries or {}).items():
            self.register(op, caps)

    @classmethod
    def with_defaults(cls) -> "OperationRequirementMap":
        return cls(DEFAULT_OPERATION_REQUIREMENTS)

    def register(self, op: str, required: Iterable[str]) -> None:
        """
        Register or overwrite the requirements for an operation.

        Args:
            op: The operation name.
            required: Tool capability ids the operation requires.
        """
        caps = frozenset(required)
        with self._lock:
            if op in self._entries and self._entries[op] != caps:
                logger.debug(f"Overriding requirements for operation '{op}': {sorted(caps)}")
            self._entries[op] = caps

    def unregister(self, op: str) -> bool:
        with self._lock:
            return self._entries.pop(op, None) is not None

    def required_tool_caps(self, op: str) -> frozenset[str]:
        with self._lock:
            return self._entries.get(op, frozenset())

    def operations(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def as_dict(self) -> Dict[str, List[str]]:
        with self._lock:
            return {op: sorted(caps) for op, caps in sorted(self._entries.items())}
