"""Mind source implementations: JSON file on disk, or an in-memory document."""

import asyncio
import copy
import json
from pathlib import Path
from typing import Any

from phasegate.domain.exceptions import MindArtifactError
from phasegate.domain.interfaces import MindSourceInterface, MindSourceSnapshot


class FilesystemMindSource(MindSourceInterface):
    """
    Reads a mind document from a JSON file.

    The fingerprint is the file's mtime and size, so touching or rewriting
    the file is enough to signal a change.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _stat_fingerprint(self) -> str:
        try:
            stat = self.path.stat()
        except OSError as e:
            raise MindArtifactError(
                f"Mind document not found: {self.path}", source=str(self.path)
            ) from e
        return f"{stat.st_mtime_ns}:{stat.st_size}"

    def _read_sync(self) -> MindSourceSnapshot:
        fingerprint = self._stat_fingerprint()
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise MindArtifactError(
                f"Cannot read mind document {self.path}: {e}", source=str(self.path)
            ) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise MindArtifactError(
                f"Invalid JSON in {self.path}: {e}", source=str(self.path)
            ) from e
        if not isinstance(data, dict):
            raise MindArtifactError(
                f"Expected an object in {self.path}, got {type(data).__name__}",
                source=str(self.path),
            )
        return MindSourceSnapshot(
            data=data, fingerprint=fingerprint, location=str(self.path)
        )

    async def read(self) -> MindSourceSnapshot:
        return await asyncio.to_thread(self._read_sync)

    async def fingerprint(self) -> str:
        return await asyncio.to_thread(self._stat_fingerprint)


class InMemoryMindSource(MindSourceInterface):
    """In-memory implementation for testing.

    ``update()`` replaces the document and bumps the fingerprint; ``remove()``
    makes the source behave like a deleted file.
    """

    def __init__(
        self, data: dict[str, Any] | None, location: str = "<memory>"
    ) -> None:
        self._data = copy.deepcopy(data)
        self._version = 0
        self.location = location
        self.reads = 0

    def update(self, data: dict[str, Any]) -> None:
        self._data = copy.deepcopy(data)
        self._version += 1

    def remove(self) -> None:
        self._data = None
        self._version += 1

    async def read(self) -> MindSourceSnapshot:
        self.reads += 1
        # yield once so concurrent loaders genuinely overlap
        await asyncio.sleep(0)
        if self._data is None:
            raise MindArtifactError("Mind document absent", source=self.location)
        return MindSourceSnapshot(
            data=copy.deepcopy(self._data),
            fingerprint=str(self._version),
            location=self.location,
        )

    async def fingerprint(self) -> str:
        if self._data is None:
            raise MindArtifactError("Mind document absent", source=self.location)
        return str(self._version)
