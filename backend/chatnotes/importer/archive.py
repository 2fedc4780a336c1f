"""Zip container access for exported archives."""

import io
import zipfile

from chatnotes.errors import MalformedArchive


class ArchiveReader:
    """Read-only view over an in-memory zip archive."""

    def __init__(self, content: bytes) -> None:
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(content))
        except zipfile.BadZipFile as e:
            raise MalformedArchive("Invalid ZIP structure", str(e)) from e

    def list_entries(self) -> list[str]:
        return [info.filename for info in self._zip.infolist() if not info.is_dir()]

    def read_entry_as_text(self, name: str) -> str:
        """Decode one entry as UTF-8 text. Raises KeyError if absent."""
        with self._zip.open(name) as fh:
            return fh.read().decode("utf-8-sig")

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
