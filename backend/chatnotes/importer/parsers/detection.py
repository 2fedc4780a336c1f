"""Auto-detect the provider format of a conversations.json index."""

from typing import Any

from chatnotes.errors import MalformedArchive


def detect_format(data: Any) -> str:
    """Detect the export format from parsed JSON structure.

    Returns "chatgpt" or "claude".
    Raises MalformedArchive for unrecognized structures.
    """
    first = data
    if isinstance(data, list):
        if not data:
            raise MalformedArchive("Empty conversation index")
        first = data[0]

    if isinstance(first, dict):
        if "mapping" in first:
            return "chatgpt"
        if "chat_messages" in first:
            return "claude"

    raise MalformedArchive("Unrecognized conversation index format")
