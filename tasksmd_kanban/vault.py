"""Document stores: where markdown documents are listed, read and written."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_REST_URL = "https://127.0.0.1:27124"


class StoreError(RuntimeError):
    """A document could not be listed, read or written."""


class DocumentStore(Protocol):
    """What the board needs from whatever holds the documents."""

    async def list_documents(self) -> list[str]: ...

    async def read(self, path: str) -> str: ...

    async def write(self, path: str, text: str) -> None: ...


class DirectoryStore:
    """Markdown files under a local directory (an Obsidian vault on disk).

    Paths are POSIX-style and relative to ``root``. Hidden directories such
    as ``.obsidian`` and ``.trash`` are not listed.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / Path(path)

    def _list(self) -> list[str]:
        found: list[str] = []
        for p in self.root.rglob("*.md"):
            rel = p.relative_to(self.root)
            if any(part.startswith(".") for part in rel.parts):
                continue
            if p.is_file():
                found.append(rel.as_posix())
        return sorted(found)

    def _read(self, path: str) -> str:
        # newline="" keeps CRLF documents byte-identical on write-back
        with open(self._resolve(path), "r", encoding="utf-8", newline="") as f:
            return f.read()

    def _write(self, path: str, text: str) -> None:
        target = self._resolve(path)
        if not target.is_file():
            raise StoreError(f"Document not found: {path}")
        tmp = target.with_name(target.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp, target)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

    async def list_documents(self) -> list[str]:
        try:
            return await asyncio.to_thread(self._list)
        except OSError as e:
            raise StoreError(f"Failed to list {self.root}: {e}") from e

    async def read(self, path: str) -> str:
        try:
            return await asyncio.to_thread(self._read, path)
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"Failed to read {path}: {e}") from e

    async def write(self, path: str, text: str) -> None:
        try:
            await asyncio.to_thread(self._write, path, text)
        except OSError as e:
            raise StoreError(f"Failed to write {path}: {e}") from e
        logger.debug("[VAULT] wrote %s (%d chars)", path, len(text))


class RestVaultStore:
    """Client for a running vault exposed by the Obsidian Local REST API plugin."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_REST_URL,
        verify: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=30.0,
            verify=verify,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = "/vault/" + quote(path, safe="/")
        try:
            resp = await self._client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {url} failed: {e}") from e
        return resp

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_documents(self) -> list[str]:
        """Walk the vault from the root and return every markdown path."""
        found: list[str] = []
        pending = [""]
        while pending:
            directory = pending.pop()
            resp = await self._request("GET", directory, headers={"Accept": "application/json"})
            for name in resp.json().get("files", []):
                full = directory + name
                if name.endswith("/"):
                    if not name.startswith("."):
                        pending.append(full)
                elif name.endswith(".md"):
                    found.append(full)
        return sorted(found)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def read(self, path: str) -> str:
        resp = await self._request("GET", path, headers={"Accept": "text/markdown"})
        return resp.content.decode("utf-8")

    async def write(self, path: str, text: str) -> None:
        await self._request(
            "PUT",
            path,
            content=text.encode("utf-8"),
            headers={"Content-Type": "text/markdown"},
        )
        logger.debug("[VAULT] PUT %s (%d chars)", path, len(text))

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
