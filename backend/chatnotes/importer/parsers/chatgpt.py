"""Parser for ChatGPT conversations.json export format.

ChatGPT's export is tree-native: a `mapping` dict of nodes with parent/children
pointers. Structural nodes (message=null) are kept out of the message map;
every other node keeps its place in mapping order, which is the order notes
are rendered in.
"""

import logging
from typing import Any

from chatnotes.errors import MalformedArchive
from chatnotes.importer.models import Conversation, Message, resolve_role

logger = logging.getLogger(__name__)


def _extract_parts(content: dict) -> list[str]:
    """Pull text out of content.parts.

    Parts can be plain strings or objects (multimodal). Objects contribute
    their `text` when present; audio transcriptions count as text too.
    """
    parts = content.get("parts")
    if not isinstance(parts, list):
        return []
    text_parts: list[str] = []
    for part in parts:
        if isinstance(part, str):
            text_parts.append(part)
        elif isinstance(part, dict) and (
            part.get("content_type") == "audio_transcription" or part.get("text")
        ):
            text_parts.append(part.get("text") or "")
    return text_parts


def _parse_message(node_id: str, message: dict) -> Message:
    content = message.get("content")
    has_content = isinstance(content, dict) and isinstance(content.get("parts"), list)
    if isinstance(content, dict) and content.get("content_type") == "multimodal_text":
        logger.debug("Multimodal message %s", node_id)

    author = message.get("author")
    role = resolve_role(author.get("role") if isinstance(author, dict) else None)
    if role == "unknown":
        logger.debug("Unrecognized author on message %s: %r", node_id, author)

    return Message(
        id=str(message.get("id") or node_id),
        author_role=role,
        parts=_extract_parts(content) if has_content else [],
        create_time=message.get("create_time"),
        has_content=has_content,
    )


def _parse_single(conv: Any) -> Conversation:
    """Parse a single ChatGPT conversation object into a Conversation."""
    if not isinstance(conv, dict):
        raise MalformedArchive("Conversation entry is not an object")
    conv_id = conv.get("id") or conv.get("conversation_id")
    mapping = conv.get("mapping")
    create_time = conv.get("create_time")
    if not conv_id or not isinstance(mapping, dict) or create_time is None:
        raise MalformedArchive(
            "Conversation is missing id, mapping or create_time",
            str(conv_id or conv.get("title") or "?"),
        )

    messages: dict[str, Message] = {}
    for node_id, entry in mapping.items():
        message = entry.get("message") if isinstance(entry, dict) else None
        if not isinstance(message, dict):
            continue
        messages[node_id] = _parse_message(node_id, message)

    update_time = conv.get("update_time")
    return Conversation(
        id=str(conv_id),
        title=conv.get("title") or "",
        create_time=float(create_time),
        update_time=float(update_time if update_time is not None else create_time),
        provider="chatgpt",
        messages=messages,
    )


def parse_chatgpt(data: dict | list) -> list[Conversation]:
    """Parse ChatGPT conversations.json (array or single conversation)."""
    if isinstance(data, list):
        return [_parse_single(conv) for conv in data]
    return [_parse_single(data)]
