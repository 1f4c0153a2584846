"""Intent Router.

This package routes a free-text user request through a two-stage
*plan then execute* pipeline and enforces a capability-based security policy
between the two stages.

High-level architecture
-----------------------

The codebase is organized around two capability channels:

- **Tool capabilities** (``ToolCap``): authorize an action with side effects,
  e.g. sending an email or writing a file.
- **Data capabilities** (``DataCap``): authorize handling data that carries a
  sharing or sensitivity tag, e.g. ``share_with:team`` or ``pii_allowed``.

A planner (LLM or deterministic) turns a prompt into a plan of steps. Each step
declares the capabilities it needs. Nothing runs until the policy engine has
compared those declarations against the capability registry and the tags on
the data the step touches.

Core subpackages
----------------

- ``intent_router.agent_core``:

  - Capability registry and operation requirement map.
  - Policy engine (tool, data and dependency checks).
  - A LangGraph-based plan execution engine with fail-fast semantics.
  - Repository interfaces and SQL implementations for persistence.

- ``intent_router.server``: FastAPI request surface.

Typical workflow
----------------

Most integrations should use ``intent_router.agent_core.service.IntentRouterService``:

1. Submit a prompt; the planner proposes a plan and the policy engine checks it.
2. If the plan is clean it is persisted with status ``pending``.
3. Execute the plan; every step is re-checked immediately before it runs.
4. Inspect the append-only event log and the entities produced along the way.
"""
