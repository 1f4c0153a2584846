"""Capability registry and operation requirement map.

A *capability* is a named permission:

- ``ToolCap`` capabilities gate actions (e.g. ``SEND_EMAIL``).
- ``DataCap`` capabilities gate information flow (e.g. ``share_with:team``).

This package exports:

- ``CapabilityRegistry``: id → ``Capability`` store with system/custom provenance.
- ``OperationRequirementMap``: operation name → required tool capabilities.
- ``system_capabilities``: the capability set seeded at bootstrap.
"""

from .builtin import system_capabilities
from .operations import DEFAULT_OPERATION_REQUIREMENTS, OperationRequirementMap
from .registry import CapabilityRegistry

__all__ = [
    "CapabilityRegistry",
    "DEFAULT_OPERATION_REQUIREMENTS",
    "OperationRequirementMap",
    "system_capabilities",
]
