from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import uuid4

from ..schemas.domain import Entity
from .base import Tool, ToolContext, ToolResult


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class FetchDataTool(Tool):
    """
    Fetch data from a named source.

    When ``entity_id`` is given and an entity backend is configured, the entity
    content is returned.
    """

    name: str = "fetch_data"
    description: str = "Fetch data from various sources"
    required_capabilities: tuple[str, ...] = ("READ_FILE", "READ_DATABASE")

    async def run(self, ctx: ToolContext, *, args: Dict[str, Any]) -> ToolResult:
        entity_id = args.get("entity_id")
        fn = getattr(ctx.deps, "get_entity", None)
        if entity_id and fn is not None:
            entity = await fn(str(entity_id))
            if entity is None:
                return ToolResult(ok=False, output={"error": f"entity not found: {entity_id}"})
            return ToolResult(ok=True, output={"entity_id": entity.id, "data": entity.content, "timestamp": _now_iso()})

        source = str(args.get("source") or "").strip()
        if not source:
            return ToolResult(ok=False, output={"error": "missing source"})
        return ToolResult(ok=True, output={"data": f"Fetched data from {source}", "timestamp": _now_iso()})


@dataclass(frozen=True)
class SendMessageTool(Tool):
    """
    Send a message through a channel.

    Delegates to the ``send_message`` backend when configured; otherwise the
    delivery is simulated and reported as such.
    """

    name: str = "send_message"
    description: str = "Send messages via various channels"
    required_capabilities: tuple[str, ...] = ("SEND_EMAIL",)

    async def run(self, ctx: ToolContext, *, args: Dict[str, Any]) -> ToolResult:
        to = str(args.get("to") or "").strip()
        if not to:
            return ToolResult(ok=False, output={"error": "missing recipient"})
        content = args.get("content")
        if content is None and ctx.context:
            content = next(iter(ctx.context.values()))

        fn = getattr(ctx.deps, "send_message", None)
        if fn is not None:
            result = await fn(channel=str(args.get("channel") or "email"), to=to, subject=args.get("subject"), content=content)
            if isinstance(result, dict):
                return ToolResult(ok=True, output=result)
            return ToolResult(ok=True, output={"result": result})

        return ToolResult(
            ok=True,
            output={"message_id": str(uuid4()), "sent_at": _now_iso(), "status": "simulated", "to": to},
        )


@dataclass(frozen=True)
class CreateDocumentTool(Tool):
    """
    Create a document entity.

    The produced entity proposes the step's declared data capabilities as its
    tags; the engine intersects proposals with the declaration again and adds
    the tags inherited from consumed entities.
    """

    name: str = "create_document"
    description: str = "Create new documents or content"
    required_capabilities: tuple[str, ...] = ("WRITE_FILE",)

    async def run(self, ctx: ToolContext, *, args: Dict[str, Any]) -> ToolResult:
        title = str(args.get("title") or "").strip()
        content = args.get("content")
        if not title or content is None:
            return ToolResult(ok=False, output={"error": "title and content are required"})
        entity = Entity(
            content=str(content),
            capabilities=list(ctx.step.data_caps),
            metadata={"title": title, "format": str(args.get("format") or "text"), "created_by": "executor"},
        )
        return ToolResult(ok=True, output={"document_id": entity.id}, entities=[entity])


@dataclass(frozen=True)
class SearchEntitiesTool(Tool):
    name: str = "search_entities"
    description: str = "Search existing entities by content"
    required_capabilities: tuple[str, ...] = ("READ_DATABASE",)

    async def run(self, ctx: ToolContext, *, args: Dict[str, Any]) -> ToolResult:
        query = str(args.get("query") or "").strip()
        if not query:
            return ToolResult(ok=False, output={"error": "missing query"})
        limit = int(args.get("limit") or 10)

        fn = getattr(ctx.deps, "search_entities", None)
        found = list(await fn(query, limit)) if fn is not None else []
        return ToolResult(
            ok=True,
            output={
                "query": query,
                "results": [{"id": e.id, "content": e.content} for e in found],
                "total": len(found),
            },
        )


@dataclass(frozen=True)
class AnalyzeContentTool(Tool):
    name: str = "analyze_content"
    description: str = "Analyze or process content"
    required_capabilities: tuple[str, ...] = ()

    async def run(self, ctx: ToolContext, *, args: Dict[str, Any]) -> ToolResult:
        content = str(args.get("content") or "")
        analysis_type = str(args.get("analysis_type") or "general")
        words = content.split()
        return ToolResult(
            ok=True,
            output={
                "analysis": f"Analyzed content of type: {analysis_type}",
                "word_count": len(words),
                "char_count": len(content),
                "timestamp": _now_iso(),
            },
        )


@dataclass(frozen=True)
class TransformDataTool(Tool):
    name: str = "transform_data"
    description: str = "Transform data from one format to another"
    required_capabilities: tuple[str, ...] = ()

    async def run(self, ctx: ToolContext, *, args: Dict[str, Any]) -> ToolResult:
        if "data" not in args:
            return ToolResult(ok=False, output={"error": "missing data"})
        return ToolResult(
            ok=True,
            output={
                "transformed_data": args["data"],
                "from_format": args.get("from_format"),
                "to_format": args.get("to_format"),
                "timestamp": _now_iso(),
            },
        )


def default_tools() -> list[Tool]:
    return [
        FetchDataTool(),
        SendMessageTool(),
        CreateDocumentTool(),
        SearchEntitiesTool(),
        AnalyzeContentTool(),
        TransformDataTool(),
    ]
