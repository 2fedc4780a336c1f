"""Message Merger: fold a newer conversation revision into an existing note."""

from dataclasses import dataclass, field

from chatnotes.importer.models import Conversation, Message
from chatnotes.notes.header import join_note, replace_display_line, split_note
from chatnotes.notes.markers import scan_message_ids
from chatnotes.notes.renderer import KEY_UPDATE_TIME, UPDATED_LABEL, render_messages
from chatnotes.utils.timefmt import format_display


@dataclass
class MergeResult:
    text: str
    added: list[Message] = field(default_factory=list)


def compute_delta(conversation: Conversation, existing_text: str) -> list[Message]:
    """Valid messages not yet represented by a marker in `existing_text`, in traversal order."""
    present = set(scan_message_ids(existing_text))
    return [
        m for m in conversation.messages.values()
        if m.id not in present and m.is_valid
    ]


def update_revision(text: str, update_time: float) -> str:
    """Rewrite the revision timestamp in the header and the display line."""
    stamp = format_display(update_time)
    header, body = split_note(text)
    if header is not None and header.get(KEY_UPDATE_TIME) is not None:
        header.set(KEY_UPDATE_TIME, stamp)
    body = replace_display_line(body, UPDATED_LABEL, stamp)
    return join_note(header, body)


def append_blocks(text: str, rendered: str) -> str:
    """Append rendered blocks after a blank line, leaving existing text untouched."""
    if not rendered:
        return text
    if text and not text.endswith("\n"):
        text += "\n"
    if text and not text.endswith("\n\n"):
        text += "\n"
    return text + rendered


def merge_conversation(existing_text: str, conversation: Conversation) -> MergeResult:
    """Update metadata and append only the new messages."""
    text = update_revision(existing_text, conversation.update_time)
    added = compute_delta(conversation, text)
    text = append_blocks(text, render_messages(added, conversation.provider))
    return MergeResult(text=text, added=added)
