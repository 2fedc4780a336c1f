"""Note metadata header: an ordered block of ``key: value`` lines.

Grammar::

    ---
    key: value
    ...
    ---
    <body>

Untouched fields re-render byte-identically, so rewriting one field never
disturbs the rest of a note.
"""

from dataclasses import dataclass, field

DELIMITER = "---"


@dataclass
class HeaderField:
    key: str | None  # None for lines that are not key/value pairs
    value: str
    raw: str

    @classmethod
    def parse(cls, line: str) -> "HeaderField":
        key, sep, value = line.partition(":")
        if not sep or not key.strip() or key != key.strip():
            return cls(key=None, value=line, raw=line)
        return cls(key=key, value=value.strip(), raw=line)


@dataclass
class NoteHeader:
    fields: list[HeaderField] = field(default_factory=list)

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, str]]) -> "NoteHeader":
        header = cls()
        for key, value in pairs:
            header.set(key, value)
        return header

    def get(self, key: str) -> str | None:
        for f in self.fields:
            if f.key == key:
                return f.value
        return None

    def set(self, key: str, value: str) -> None:
        """Replace the first field named `key`, or append it."""
        raw = f"{key}: {value}"
        for f in self.fields:
            if f.key == key:
                f.value = value
                f.raw = raw
                return
        self.fields.append(HeaderField(key=key, value=value, raw=raw))

    def render(self) -> str:
        lines = [DELIMITER, *(f.raw for f in self.fields), DELIMITER]
        return "\n".join(lines) + "\n"


def split_note(text: str) -> tuple[NoteHeader | None, str]:
    """Split a note into its header and body. Notes without a header return (None, text)."""
    opening = DELIMITER + "\n"
    if not text.startswith(opening):
        return None, text
    closing = "\n" + DELIMITER + "\n"
    end = text.find(closing, len(opening) - 1)
    if end == -1:
        return None, text
    block = text[len(opening):end]
    header = NoteHeader(
        fields=[HeaderField.parse(line) for line in block.split("\n")] if block else []
    )
    return header, text[end + len(closing):]


def join_note(header: NoteHeader | None, body: str) -> str:
    if header is None:
        return body
    return header.render() + body


def replace_display_line(body: str, label: str, value: str) -> str:
    """Rewrite the first body line starting with ``<label>: `` in place."""
    prefix = f"{label}: "
    lines = body.split("\n")
    for i, line in enumerate(lines):
        if line.startswith(prefix):
            lines[i] = prefix + value
            return "\n".join(lines)
    return body


def quote_value(value: str) -> str:
    """Double-quote a header value, escaping embedded quotes and backslashes."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
