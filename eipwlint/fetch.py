"""Sources of referenced documents."""

from __future__ import annotations

import abc
import asyncio
import io
from os import PathLike


class Fetch(abc.ABC):
    """Reads the text of a referenced document."""

    @abc.abstractmethod
    async def fetch(self, path: str | PathLike[str]) -> str:
        """Return the document's text, or raise OSError."""


class NullFetch(Fetch):
    """Refuses every request."""

    async def fetch(self, path: str | PathLike[str]) -> str:
        raise io.UnsupportedOperation(f"fetching `{path}` is not supported")


def _read(path: str | PathLike[str]) -> str:
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


class FileFetch(Fetch):
    """Reads documents from the local file system as UTF-8."""

    async def fetch(self, path: str | PathLike[str]) -> str:
        return await asyncio.to_thread(_read, path)


DefaultFetch = FileFetch