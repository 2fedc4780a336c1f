"""Note Renderer: conversations and message deltas to markdown note text."""

import logging

from chatnotes.importer.models import Conversation, Message
from chatnotes.notes.header import NoteHeader, quote_value
from chatnotes.notes.markers import render_marker
from chatnotes.utils.timefmt import format_display, now

logger = logging.getLogger(__name__)

SOURCE_NAME = "chatnotes"

# Header keys, in the order they are written.
KEY_SOURCE = "source"
KEY_PROVIDER = "provider"
KEY_ALIASES = "aliases"
KEY_CONVERSATION_ID = "conversation_id"
KEY_URL = "url"
KEY_CREATE_TIME = "create_time"
KEY_UPDATE_TIME = "update_time"

CREATED_LABEL = "Created"
UPDATED_LABEL = "Last Updated"

_ASSISTANT_LABELS = {
    "chatgpt": "ChatGPT",
    "claude": "Claude",
}

NO_CONTENT = "[No content]"
NO_TEXT_CONTENT = "[No text content]"


def assistant_label(provider: str) -> str:
    return _ASSISTANT_LABELS.get(provider, "Assistant")


def build_header(
    *,
    provider: str,
    title: str,
    create_time: float,
    update_time: float,
    conversation_id: str | None = None,
    url: str | None = None,
) -> NoteHeader:
    pairs = [
        (KEY_SOURCE, SOURCE_NAME),
        (KEY_PROVIDER, provider),
        (KEY_ALIASES, quote_value(title)),
    ]
    if conversation_id:
        pairs.append((KEY_CONVERSATION_ID, conversation_id))
    if url:
        pairs.append((KEY_URL, url))
    pairs.append((KEY_CREATE_TIME, format_display(create_time)))
    pairs.append((KEY_UPDATE_TIME, format_display(update_time)))
    return NoteHeader.from_pairs(pairs)


def render_title_block(title: str, create_time: float, update_time: float) -> str:
    return (
        f"\n# Title: {title}\n\n"
        f"{CREATED_LABEL}: {format_display(create_time)}\n"
        f"{UPDATED_LABEL}: {format_display(update_time)}\n\n\n"
    )


def render_message(message: Message, provider: str) -> str:
    """Render one message block, terminated by its marker line.

    Human turns use a level-3 heading and ``>`` quotes; everything else a
    level-4 heading and ``>>`` quotes. Assistant turns close with a rule.
    """
    if message.author_role == "human":
        author, heading, quote = "User", "###", ">"
    elif message.author_role == "assistant":
        author, heading, quote = assistant_label(provider), "####", ">>"
    else:
        author, heading, quote = "Unknown", "####", ">>"
        logger.warning("Author information missing or invalid on message %s", message.id)

    timestamp = message.create_time if message.create_time is not None else now()
    block = f"{heading} {author}, on {format_display(timestamp)};\n"

    if not message.has_content:
        logger.warning("Message %s has no content", message.id)
        block += f"{quote} {NO_CONTENT}"
    elif not message.is_valid:
        logger.warning("Message %s has no text parts", message.id)
        block += f"{quote} {NO_TEXT_CONTENT}"
    else:
        block += "\n".join(f"{quote} {line}" for line in message.text.split("\n"))

    block += f"\n{render_marker(message.id)}\n"
    if message.author_role == "assistant":
        block += "\n---\n"
    return block + "\n\n"


def render_messages(messages: list[Message], provider: str) -> str:
    return "".join(render_message(m, provider) for m in messages)


def render_note(conversation: Conversation) -> str:
    """Render a complete note: header, title block, then every valid message."""
    title = conversation.display_title
    header = build_header(
        provider=conversation.provider,
        title=title,
        create_time=conversation.create_time,
        update_time=conversation.update_time,
        conversation_id=conversation.id,
    )
    return (
        header.render()
        + render_title_block(title, conversation.create_time, conversation.update_time)
        + render_messages(conversation.valid_messages(), conversation.provider)
    )


def render_standalone(
    *,
    title: str,
    body: str,
    provider: str,
    create_time: float,
    update_time: float,
    conversation_id: str | None = None,
    url: str | None = None,
) -> str:
    """Render a note whose body arrived pre-formatted (single-note imports)."""
    header = build_header(
        provider=provider,
        title=title,
        create_time=create_time,
        update_time=update_time,
        conversation_id=conversation_id,
        url=url,
    )
    return header.render() + "\n" + body
