"""Capability registry.

The registry holds every capability identifier the policy engine may consult,
both tool capabilities (``ToolCap``) and data capabilities (``DataCap``).

The registry is an explicitly constructed object. Application wiring creates one
instance at startup, seeds it with the system capabilities and passes it to the
policy engine and the tool provider registry. Mutations are visible to the very
next validation.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import CapabilityForbiddenError, CapabilityNotFoundError, DuplicateCapabilityError
from ..schemas.domain import Capability, CapabilityKind


class CapabilityRegistry:
    """
    Thread-safe in-memory store of ``Capability`` records keyed by id.

    Ids are unique across the whole registry regardless of kind.

    Notes:
        - System capabilities can never be updated, replaced or removed.
        - Every read returns copies, so callers always observe a complete
          capability definition even while an administrative write is running.
    """

    def __init__(self, capabilities: Iterable[Capability] = (), *, is_system: bool = False) -> None:
        """
        Initialize the registry.

        Args:
            capabilities: Optional capabilities to seed the registry with.
            is_system: Whether the seeded capabilities are system capabilities.
        """
        self._lock = threading.RLock()
        self._caps: Dict[str, Capability] = {}
        for cap in capabilities:
            self.add(cap, is_system=is_system)

    def add(self, capability: Capability, *, is_system: bool = False, replace: bool = False) -> Capability:
        """
        Register a capability.

        Args:
            capability: The capability to register.
            is_system: Flag the entry as an immutable system capability.
            replace: Overwrite an existing custom entry with the same id.

        Returns:
            The stored capability.

        Raises:
            DuplicateCapabilityError: If the id exists and ``replace`` is False.
            CapabilityForbiddenError: If ``replace`` targets a system capability.
        """
        with self._lock:
            existing = self._caps.get(capability.id)
            if existing is not None:
                if not replace:
                    raise DuplicateCapabilityError(capability.id)
                if existing.is_system:
                    raise CapabilityForbiddenError(capability.id, "replace")
            stored = capability.model_copy(update={"is_system": is_system}, deep=True)
            self._caps[stored.id] = stored
            return stored.model_copy(deep=True)

    def get(self, capability_id: str) -> Optional[Capability]:
        with self._lock:
            cap = self._caps.get(capability_id)
            return cap.model_copy(deep=True) if cap is not None else None

    def has(self, capability_id: str) -> bool:
        with self._lock:
            return capability_id in self._caps

    def remove(self, capability_id: str) -> bool:
        """
        Remove a custom capability.

        Args:
            capability_id: The id to remove.

        Returns:
            True if the capability existed, False otherwise.

        Raises:
            CapabilityForbiddenError: If the capability is a system capability.
        """
        with self._lock:
            existing = self._caps.get(capability_id)
            if existing is None:
                return False
            if existing.is_system:
                raise CapabilityForbiddenError(capability_id, "remove")
            del self._caps[capability_id]
            return True

    def update(self, capability: Capability) -> Capability:
        """
        Replace kind/scope/description/metadata of a custom capability.

        The id, system flag and creation timestamp are preserved.

        Raises:
            CapabilityNotFoundError: If the id is not registered.
            CapabilityForbiddenError: If the existing entry is a system capability.
        """
        with self._lock:
            existing = self._caps.get(capability.id)
            if existing is None:
                raise CapabilityNotFoundError(capability.id)
            if existing.is_system:
                raise CapabilityForbiddenError(capability.id, "update")
            updated = existing.model_copy(
                update={
                    "kind": capability.kind,
                    "scope": capability.scope,
                    "description": capability.description,
                    "metadata": dict(capability.metadata),
                    "updated_at": datetime.now(timezone.utc),
                },
                deep=True,
            )
            self._caps[updated.id] = updated
            return updated.model_copy(deep=True)

    def list(self) -> List[Capability]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._caps.values()]

    def list_by_kind(self, kind: CapabilityKind) -> List[Capability]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._caps.values() if c.kind == kind]

    def list_by_scope(self, scope: str) -> List[Capability]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._caps.values() if c.scope == scope]

    def valid_ids(self, kind: CapabilityKind) -> frozenset[str]:
        """Return a snapshot of every registered id of the given kind."""
        with self._lock:
            return frozenset(cid for cid, c in self._caps.items() if c.kind == kind)

    def hierarchy(self) -> Dict[str, List[str]]:
        """Group capability ids by scope, each group sorted by id."""
        out: Dict[str, List[str]] = {}
        for cap in self.list():
            out.setdefault(cap.scope, []).append(cap.id)
        return {scope: sorted(ids) for scope, ids in sorted(out.items())}

    def validate_tool_operation(
        self, required: Iterable[str], declared: Sequence[str]
    ) -> Tuple[List[str], List[str]]:
        """
        Compare an operation's required tool capabilities with a declaration.

        Returns:
            ``(missing, invalid)``: required ids that were not declared, and
            declared ids that are not registered tool capabilities.
        """
        tool_ids = self.valid_ids(CapabilityKind.tool)
        declared_set = set(declared)
        missing = [cid for cid in required if cid not in declared_set]
        invalid = [cid for cid in declared if cid not in tool_ids]
        return missing, invalid

    def export_capabilities(self) -> List[Dict[str, Any]]:
        """Serialize custom capabilities. System capabilities are never exported."""
        return [c.model_dump(mode="json") for c in self.list() if not c.is_system]

    def import_capabilities(self, items: Iterable[Mapping[str, Any]], *, replace: bool = False) -> int:
        """
        Load custom capabilities from ``export_capabilities`` output.

        Existing ids are skipped unless ``replace`` is set. System ids are always
        skipped and imported entries are never flagged as system.

        Returns:
            The number of capabilities imported.
        """
        count = 0
        for item in items:
            cap = Capability.model_validate({**dict(item), "is_system": False})
            with self._lock:
                existing = self._caps.get(cap.id)
                if existing is not None and (existing.is_system or not replace):
                    continue
                self.add(cap, replace=replace)
            count += 1
        return count
