"""Conversation Extractor: archive -> list of Conversation records."""

import json
import logging
import zipfile

from chatnotes.errors import MalformedArchive
from chatnotes.importer.archive import ArchiveReader
from chatnotes.importer.models import Conversation
from chatnotes.importer.parsers.chatgpt import parse_chatgpt
from chatnotes.importer.parsers.claude import parse_claude
from chatnotes.importer.parsers.detection import detect_format

logger = logging.getLogger(__name__)

INDEX_ENTRY = "conversations.json"


def _find_index(entries: list[str]) -> str:
    """Locate the conversation index: at the archive root, else a single nested copy."""
    if INDEX_ENTRY in entries:
        return INDEX_ENTRY
    nested = [e for e in entries if e.endswith("/" + INDEX_ENTRY)]
    if len(nested) == 1:
        return nested[0]
    raise MalformedArchive(
        "Invalid ZIP structure",
        f"File '{INDEX_ENTRY}' not found in the zip file",
    )


def parse_index(raw: str) -> list[Conversation]:
    """Parse the text of a conversation index. All-or-nothing."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedArchive("Invalid JSON in conversation index", str(e)) from e

    if isinstance(data, list) and not data:
        return []
    fmt = detect_format(data)
    try:
        if fmt == "chatgpt":
            return parse_chatgpt(data)
        return parse_claude(data)
    except MalformedArchive:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise MalformedArchive("Unexpected conversation structure", str(e)) from e


def extract(reader: ArchiveReader) -> list[Conversation]:
    """Read and parse every conversation in the archive."""
    name = _find_index(reader.list_entries())
    try:
        raw = reader.read_entry_as_text(name)
    except (KeyError, UnicodeDecodeError, OSError, zipfile.BadZipFile) as e:
        raise MalformedArchive(f"Cannot read '{name}'", str(e)) from e

    conversations = parse_index(raw)
    logger.info("Extracted %d conversation(s) from %s", len(conversations), name)
    return conversations
