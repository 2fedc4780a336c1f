"""Intermediate representation for extracted conversations.

All parsers produce Conversation/Message, which the reconciliation engine
consumes. This decouples format-specific parsing from note rendering.
"""

from dataclasses import dataclass, field
from typing import Literal

AuthorRole = Literal["human", "assistant", "unknown"]

_ROLE_ALIASES: dict[str, AuthorRole] = {
    "user": "human",
    "human": "human",
    "assistant": "assistant",
    "tool": "assistant",
    "system": "assistant",
}


def resolve_role(raw: object) -> AuthorRole:
    """Map a provider's author role onto the closed set; anything else is unknown."""
    if isinstance(raw, str):
        return _ROLE_ALIASES.get(raw.lower(), "unknown")
    return "unknown"


@dataclass
class Message:
    """A single turn in an exported conversation."""

    id: str
    author_role: AuthorRole
    parts: list[str] = field(default_factory=list)
    create_time: float | None = None  # Unix epoch seconds
    has_content: bool = True  # False when the export carried no content object

    @property
    def text(self) -> str:
        return "\n".join(self.parts)

    @property
    def is_valid(self) -> bool:
        """A message is renderable only if it has at least one non-empty text part."""
        return any(part.strip() for part in self.parts)


@dataclass
class Conversation:
    """A complete exported conversation, ready for reconciliation."""

    id: str
    title: str
    create_time: float
    update_time: float
    provider: str  # "chatgpt" | "claude"
    messages: dict[str, Message] = field(default_factory=dict)  # node id -> message, traversal order

    def valid_messages(self) -> list[Message]:
        return [m for m in self.messages.values() if m.is_valid]

    @property
    def display_title(self) -> str:
        return " ".join(self.title.split()) or "Untitled"
