"""
Content identity digests for lesson sections.

Two sections hash identically when their semantic content is equal, no matter
in which order the JSON keys were written. The template flag is excluded so
marking a section as a template does not change its identity.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

HASHED_FIELDS = ("id", "title", "type", "content", "media", "order")
TEMPLATE_FLAG = "sectionTemplate"


def canonicalize(value: Any) -> Any:
    """Return a copy of value with every mapping's keys sorted, recursively.

    Arrays keep their element order; only object key order is normalized.
    """
    if isinstance(value, Mapping):
        return {str(key): canonicalize(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    return value


def content_body(section: Mapping[str, Any]) -> dict[str, Any]:
    """Build the part of a section that defines its content identity."""
    body = {name: section[name] for name in HASHED_FIELDS if name in section}

    metadata = section.get("metadata")
    if isinstance(metadata, Mapping):
        rest = {key: value for key, value in metadata.items() if key != TEMPLATE_FLAG}
        if rest:
            body["metadata"] = rest

    return body


def serialize(value: Any) -> str:
    """Serialize to the compact, key-sorted JSON form used for hashing."""
    return json.dumps(
        canonicalize(value),
        ensure_ascii=False,
        separators=(",", ":"),
        default=str,
    )


def digest(section: Mapping[str, Any]) -> str:
    """SHA-256 hex digest of a section's content body."""
    serialized = serialize(content_body(section))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
