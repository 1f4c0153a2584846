"""Repository interfaces and SQL implementations for router persistence.

The repository layer is the persistence boundary for the execution engine and
the service.

Responsibilities
----------------

- Provide a small set of async repository interfaces (Protocols).
- Persist durable records:

  - immutable prompts,
  - plans and their status,
  - entities and their capability tags,
  - the append-only event log,
  - the capability registry.

Design notes
------------

The engine is written against interfaces so it can be used with a SQL
database (async SQLAlchemy implementation in ``repos.sql``) or with in-memory
fakes in unit tests.
"""

from .interfaces import (
    CapabilityRepository,
    EntityRepository,
    EventRepository,
    PlanRepository,
    PromptRepository,
)

__all__ = [
    "CapabilityRepository",
    "EntityRepository",
    "EventRepository",
    "PlanRepository",
    "PromptRepository",
]
