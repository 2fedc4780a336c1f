"""Parser for Claude.ai conversation export format.

Claude.ai's export carries a `chat_messages` array. Content is an array of
typed blocks (text, tool_use, tool_result, ...); only text blocks are kept.
Older exports only have the flat `text` field, which is used as a fallback.
"""

from typing import Any

from chatnotes.errors import MalformedArchive
from chatnotes.importer.models import Conversation, Message, resolve_role
from chatnotes.utils.timefmt import parse_iso


def _extract_parts(message: dict) -> tuple[list[str], bool]:
    """Return (text parts, has_content) for a Claude.ai message."""
    blocks = message.get("content")
    if isinstance(blocks, list) and blocks:
        parts = [
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        return parts, True
    text = message.get("text")
    if isinstance(text, str):
        return [text], True
    return [], False


def _parse_single(conv: Any) -> Conversation:
    """Parse a single Claude.ai conversation export into a Conversation."""
    if not isinstance(conv, dict):
        raise MalformedArchive("Conversation entry is not an object")
    conv_id = conv.get("uuid")
    chat_messages = conv.get("chat_messages")
    create_time = parse_iso(conv.get("created_at"))
    if not conv_id or not isinstance(chat_messages, list) or create_time is None:
        raise MalformedArchive(
            "Conversation is missing uuid, chat_messages or created_at",
            str(conv_id or conv.get("name") or "?"),
        )

    messages: dict[str, Message] = {}
    for index, msg in enumerate(chat_messages):
        if not isinstance(msg, dict):
            continue
        msg_id = str(msg.get("uuid") or f"{conv_id}-{index}")
        parts, has_content = _extract_parts(msg)
        messages[msg_id] = Message(
            id=msg_id,
            author_role=resolve_role(msg.get("sender")),
            parts=parts,
            create_time=parse_iso(msg.get("created_at")),
            has_content=has_content,
        )

    update_time = parse_iso(conv.get("updated_at"))
    return Conversation(
        id=str(conv_id),
        title=conv.get("name") or "",
        create_time=create_time,
        update_time=update_time if update_time is not None else create_time,
        provider="claude",
        messages=messages,
    )


def parse_claude(data: dict | list) -> list[Conversation]:
    """Parse Claude.ai export (single conversation or array)."""
    if isinstance(data, list):
        return [_parse_single(conv) for conv in data]
    return [_parse_single(data)]
