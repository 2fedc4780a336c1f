"""Message marker lines: the on-disk form of a message's merge key."""

MARKER_PREFIX = "<!-- UID: "
MARKER_SUFFIX = " -->"


def render_marker(message_id: str) -> str:
    return f"{MARKER_PREFIX}{message_id}{MARKER_SUFFIX}"


def parse_marker(line: str) -> str | None:
    """Return the message id if `line` is a marker line, else None.

    Only whole lines count, so quoted message text (which always starts
    with a quote character) is never read as a marker.
    """
    stripped = line.strip()
    if not (stripped.startswith(MARKER_PREFIX) and stripped.endswith(MARKER_SUFFIX)):
        return None
    message_id = stripped[len(MARKER_PREFIX):-len(MARKER_SUFFIX)]
    return message_id or None


def scan_message_ids(text: str) -> list[str]:
    """All marker ids in `text`, in document order."""
    ids: list[str] = []
    for line in text.splitlines():
        message_id = parse_marker(line)
        if message_id is not None:
            ids.append(message_id)
    return ids
