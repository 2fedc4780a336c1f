"""Parser for standalone markdown conversation exports (provider "echoes").

The file carries its own metadata instead of a container index::

    ## Overview
    - **Title**: Trip planning
    - **ID**: 1234
    - **URL**: https://...
    - **Created**: 2024-05-01T10:00:00Z
    - **Last Updated**: 2024-05-02T08:30:00Z

    ## Conversation
    ...
"""

import re
from dataclasses import dataclass

from chatnotes.utils.timefmt import now, parse_iso

PROVIDER = "echoes"

_OVERVIEW = re.compile(r"## Overview\r?\n(.*?)\r?\n\r?\n## Conversation", re.DOTALL)
_FIELD = re.compile(r"- \*\*(.+?)\*\*:\s*(.*)")
_CONVERSATION_HEADING = "## Conversation"


@dataclass
class StandaloneNote:
    title: str
    conversation: str  # markdown from the "## Conversation" heading on
    create_time: float
    update_time: float
    conversation_id: str | None = None
    url: str | None = None


def _parse_overview(text: str) -> dict[str, str]:
    match = _OVERVIEW.search(text)
    if not match:
        return {}
    fields: dict[str, str] = {}
    for line in match.group(1).splitlines():
        m = _FIELD.match(line.strip())
        if m:
            key = re.sub(r"\s+", "", m.group(1)).lower()
            fields[key] = m.group(2).strip()
    return fields


def parse_standalone(text: str, fallback_title: str) -> StandaloneNote:
    """Parse a standalone export. Missing timestamps default to now."""
    meta = _parse_overview(text)
    index = text.find(_CONVERSATION_HEADING)
    conversation = text[index:] if index >= 0 else text

    created = parse_iso(meta.get("created"))
    if created is None:
        created = float(int(now()))
    updated = parse_iso(meta.get("lastupdated") or meta.get("updated"))

    return StandaloneNote(
        title=meta.get("title") or meta.get("id") or fallback_title or "Untitled",
        conversation=conversation,
        create_time=created,
        update_time=updated if updated is not None else created,
        conversation_id=meta.get("id") or None,
        url=meta.get("url") or None,
    )
