"""System capability set seeded at bootstrap."""

from __future__ import annotations

from typing import List, Tuple

from ..schemas.domain import Capability, CapabilityKind

_TOOL_CAPABILITIES: Tuple[Tuple[str, str, str], ...] = (
    ("READ_FILE", "fs", "Read files from the file system"),
    ("WRITE_FILE", "fs", "Write files to the file system"),
    ("LIST_FILES", "fs", "List directory contents"),
    ("DELETE_FILE", "fs", "Delete files from the file system"),
    ("HTTP_REQUEST", "network", "Make HTTP requests"),
    ("SEARCH_WEB", "network", "Search the web"),
    ("FETCH_URL", "network", "Fetch content from URLs"),
    ("SEND_EMAIL", "smtp", "Send emails via SMTP"),
    ("SEND_SMS", "sms", "Send SMS messages"),
    ("SEND_WEBHOOK", "webhook", "Send webhook notifications"),
    ("READ_DATABASE", "database", "Read from databases"),
    ("WRITE_DATABASE", "database", "Write to databases"),
    ("EXECUTE_COMMAND", "system", "Execute system commands"),
    ("SCHEDULE_TASK", "system", "Schedule tasks for later execution"),
)

_DATA_CAPABILITIES: Tuple[Tuple[str, str, str], ...] = (
    ("share_with:public", "sharing", "Data can be shared publicly"),
    ("share_with:team", "sharing", "Data can be shared with the team"),
    ("share_with:organization", "sharing", "Data can be shared within the organization"),
    ("share_with:user", "sharing", "Data can be shared with a specific user"),
    ("pii_allowed", "privacy", "Personally identifiable information may be processed"),
    ("sensitive_data_allowed", "privacy", "Sensitive data may be processed"),
    ("financial_data_allowed", "privacy", "Financial data may be processed"),
    ("medical_data_allowed", "privacy", "Medical data may be processed"),
    ("data_transform_allowed", "processing", "Data may be transformed"),
    ("data_export_allowed", "processing", "Data may be exported"),
    ("data_analyze_allowed", "processing", "Data may be analyzed"),
    ("gdpr_compliant", "compliance", "Processing complies with GDPR"),
    ("hipaa_compliant", "compliance", "Processing complies with HIPAA"),
    ("region:eu", "geographic", "Data may be processed in the EU"),
    ("region:us", "geographic", "Data may be processed in the US"),
)


def system_capabilities() -> List[Capability]:
    """Build fresh ``Capability`` objects for the system set."""
    caps: List[Capability] = []
    for cid, scope, description in _TOOL_CAPABILITIES:
        caps.append(Capability(id=cid, kind=CapabilityKind.tool, scope=scope, description=description, is_system=True))
    for cid, scope, description in _DATA_CAPABILITIES:
        caps.append(Capability(id=cid, kind=CapabilityKind.data, scope=scope, description=description, is_system=True))
    return caps
