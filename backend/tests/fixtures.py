"""Shared test helpers: export builders and an in-memory vault."""

import io
import json
import zipfile
from typing import Any

from chatnotes.importer.models import Conversation, Message
from chatnotes.storage.base import NoteStorage

# ---------------------------------------------------------------------------
# In-memory storage
# ---------------------------------------------------------------------------


class InMemoryStorage(NoteStorage):
    """NoteStorage over a dict, with switches for injecting failures."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.folders: set[str] = set()
        self.fail_folders: set[str] = set()
        self.fail_writes: set[str] = set()
        self.writes: list[str] = []

    async def read_text(self, path: str) -> str | None:
        return self.files.get(path)

    async def write_text(self, path: str, text: str) -> None:
        if path in self.fail_writes or any(path.startswith(f + "/") for f in self.fail_folders):
            raise OSError(f"disk full: {path}")
        self.files[path] = text
        self.writes.append(path)

    async def exists(self, path: str) -> bool:
        return path in self.files or path in self.folders

    async def ensure_folder(self, path: str) -> None:
        if any(path == f or path.startswith(f + "/") for f in self.fail_folders):
            raise PermissionError(f"read-only: {path}")
        self.folders.add(path)


# ---------------------------------------------------------------------------
# ChatGPT fixture data
# ---------------------------------------------------------------------------


def chatgpt_node(
    node_id: str,
    parent: str | None,
    children: list[str],
    role: str = "user",
    content: str | None = "Hello",
    create_time: float | None = 1700000000.0,
    parts: list[Any] | None = None,
) -> dict:
    """Build a single ChatGPT mapping node."""
    msg: dict[str, Any] = {
        "id": node_id,
        "author": {"role": role},
        "create_time": create_time,
        "metadata": {},
    }
    if parts is not None:
        msg["content"] = {"content_type": "multimodal_text", "parts": parts}
    elif content is not None:
        msg["content"] = {"content_type": "text", "parts": [content]}
    return {"id": node_id, "message": msg, "parent": parent, "children": children}


def chatgpt_structural_node(node_id: str, parent: str | None, children: list[str]) -> dict:
    """Build a structural ChatGPT node (message=null)."""
    return {"id": node_id, "message": None, "parent": parent, "children": children}


def chatgpt_chain(turns: list[tuple[str, str, str]]) -> dict:
    """Mapping for a linear conversation of (node_id, role, text) turns under a structural root."""
    mapping = {"root": chatgpt_structural_node("root", None, [turns[0][0]] if turns else [])}
    for i, (node_id, role, text) in enumerate(turns):
        parent = turns[i - 1][0] if i > 0 else "root"
        children = [turns[i + 1][0]] if i + 1 < len(turns) else []
        mapping[node_id] = chatgpt_node(
            node_id, parent, children, role=role, content=text,
            create_time=1700000000.0 + i,
        )
    return mapping


def make_chatgpt_conversation(
    *,
    conv_id: str = "conv-1",
    title: str = "Test Conversation",
    create_time: float = 1700000000.0,
    update_time: float = 1700001000.0,
    mapping: dict | None = None,
) -> dict:
    """Build a complete ChatGPT conversation object."""
    if mapping is None:
        mapping = chatgpt_chain([
            ("u1", "user", "What is Python?"),
            ("a1", "assistant", "Python is a programming language."),
            ("u2", "user", "Tell me more."),
            ("a2", "assistant", "It was created by Guido van Rossum."),
        ])
    return {
        "id": conv_id,
        "title": title,
        "create_time": create_time,
        "update_time": update_time,
        "mapping": mapping,
    }


# ---------------------------------------------------------------------------
# Claude.ai fixture data
# ---------------------------------------------------------------------------


def claude_message(
    uuid: str,
    sender: str,
    text: str,
    created_at: str = "2026-02-18T03:23:11.721912Z",
    content_blocks: list[dict] | None = None,
) -> dict:
    """Build a single Claude.ai chat message."""
    if content_blocks is None:
        content_blocks = [{"type": "text", "text": text, "citations": []}]
    return {
        "uuid": uuid,
        "text": "",
        "content": content_blocks,
        "sender": sender,
        "created_at": created_at,
        "updated_at": created_at,
        "attachments": [],
        "files": [],
    }


def make_claude_conversation(
    *,
    uuid: str = "conv-claude-1",
    name: str = "Test Claude Conversation",
    updated_at: str = "2026-02-18T05:39:56.754588Z",
    messages: list[dict] | None = None,
) -> dict:
    """Build a complete Claude.ai conversation export."""
    if messages is None:
        messages = [
            claude_message("m1", "human", "Hello!"),
            claude_message("m2", "assistant", "Hi there!"),
        ]
    return {
        "uuid": uuid,
        "name": name,
        "created_at": "2026-02-18T03:23:09.848343Z",
        "updated_at": updated_at,
        "chat_messages": messages,
    }


# ---------------------------------------------------------------------------
# Archives and records
# ---------------------------------------------------------------------------

ZIP_DATE = (2024, 1, 1, 0, 0, 0)


def _zip_info(name: str) -> zipfile.ZipInfo:
    return zipfile.ZipInfo(name, date_time=ZIP_DATE)


def make_archive(conversations: Any, *, entry: str = "conversations.json", extra: dict | None = None) -> bytes:
    """Zip a conversations index (anything JSON-serializable, or raw text).

    Entry timestamps are fixed so equal inputs give byte-identical archives.
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        payload = conversations if isinstance(conversations, str) else json.dumps(conversations)
        zf.writestr(_zip_info(entry), payload)
        for name, data in (extra or {}).items():
            zf.writestr(_zip_info(name), data)
    return buf.getvalue()


def make_message(
    message_id: str,
    role: str = "human",
    text: str | None = "Hello",
    create_time: float | None = 1700000000.0,
) -> Message:
    return Message(
        id=message_id,
        author_role=role,  # type: ignore[arg-type]
        parts=[text] if text is not None else [],
        create_time=create_time,
        has_content=text is not None,
    )


def make_conversation(
    conv_id: str = "c1",
    title: str = "Trip",
    messages: list[Message] | None = None,
    *,
    create_time: float = 1700000000.0,
    update_time: float = 1700000000.0,
    provider: str = "chatgpt",
) -> Conversation:
    if messages is None:
        messages = [
            make_message("m1", "human", "Hi"),
            make_message("m2", "assistant", "Hello"),
        ]
    return Conversation(
        id=conv_id,
        title=title,
        create_time=create_time,
        update_time=update_time,
        provider=provider,
        messages={m.id: m for m in messages},
    )
