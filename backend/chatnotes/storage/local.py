"""Filesystem-backed note storage rooted at a vault directory."""

from pathlib import Path, PurePosixPath

import aiofiles
import aiofiles.os

from chatnotes.storage.base import NoteStorage


class LocalVaultStorage(NoteStorage):
    """Async file I/O under a single root directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        """Map a vault path to disk, refusing anything outside the root."""
        rel = PurePosixPath(path.replace("\\", "/"))
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"Path escapes the vault: {path}")
        return self._root.joinpath(*rel.parts)

    async def read_text(self, path: str) -> str | None:
        target = self._resolve(path)
        if not await aiofiles.os.path.isfile(target):
            return None
        async with aiofiles.open(target, encoding="utf-8") as f:
            return await f.read()

    async def write_text(self, path: str, text: str) -> None:
        target = self._resolve(path)
        if await aiofiles.os.path.isdir(target):
            raise IsADirectoryError(f"Cannot write to '{path}'; it is a folder.")
        await aiofiles.os.makedirs(target.parent, exist_ok=True)
        async with aiofiles.open(target, "w", encoding="utf-8", newline="") as f:
            await f.write(text)

    async def exists(self, path: str) -> bool:
        return await aiofiles.os.path.exists(self._resolve(path))

    async def ensure_folder(self, path: str) -> None:
        target = self._resolve(path)
        if await aiofiles.os.path.isfile(target):
            raise NotADirectoryError(f"'{path}' exists and is a file")
        await aiofiles.os.makedirs(target, exist_ok=True)
