"""Filesystem capability backed by a sandboxed directory on local disk."""
from __future__ import annotations

import asyncio
import hashlib
import os
import shutil
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote, urlparse

import httpx
import structlog

from hostsuite.core.errors import ExternalOperationError

from .base import DownloadResult, FileInfo, FileSystemCapability

logger = structlog.get_logger()

_CHUNK_SIZE = 64 * 1024


class LocalFileSystem(FileSystemCapability):
    """Resolves every path inside ``root`` and refuses anything outside it.

    Paths are relative to the sandbox root, or ``file://`` URIs that point
    inside it. Downloads go through ``httpx``; pass ``transport`` to route them
    elsewhere (for example ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        root: Path | str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        download_timeout: float = 30.0,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self._transport = transport
        self._download_timeout = download_timeout
        self._log = logger.bind(component="filesystem", root=str(self.root))

    # -- path handling ------------------------------------------------------

    def resolve(self, path: str, operation: str) -> Path:
        text = str(path)
        if text.startswith("file://"):
            candidate = Path(unquote(urlparse(text).path))
        else:
            candidate = self.root / text
        resolved = Path(os.path.normpath(candidate))
        if resolved != self.root and self.root not in resolved.parents:
            raise ExternalOperationError(
                operation,
                f"Location '{path}' isn't inside the sandbox directory.",
                path=text,
            )
        return resolved

    def uri_for(self, target: Path) -> str:
        uri = target.as_uri()
        if target.is_dir() and not uri.endswith("/"):
            uri += "/"
        return uri

    # -- capability ---------------------------------------------------------

    async def get_info(self, path: str, *, md5: bool = False) -> FileInfo:
        target = self.resolve(path, "get_info")
        return await asyncio.to_thread(self._get_info, target, md5)

    def _get_info(self, target: Path, md5: bool) -> FileInfo:
        if not target.exists():
            return FileInfo(exists=False, uri=target.as_uri())
        stat = target.stat()
        digest = None
        if md5 and target.is_file():
            digest = _md5_of(target)
        return FileInfo(
            exists=True,
            uri=self.uri_for(target),
            is_directory=target.is_dir(),
            size=stat.st_size,
            modification_time=stat.st_mtime,
            md5=digest,
        )

    async def read_as_string(self, path: str) -> str:
        target = self.resolve(path, "read_as_string")
        if not target.is_file():
            reason = "is a directory" if target.is_dir() else "was not found"
            raise ExternalOperationError("read_as_string", f"File '{path}' could not be read because it {reason}.", path=path)
        return await asyncio.to_thread(_read_text, target)

    async def write_as_string(self, path: str, contents: str) -> None:
        target = self.resolve(path, "write_as_string")
        self._require_parent(target, path, "write_as_string")
        if target.is_dir():
            raise ExternalOperationError("write_as_string", f"Cannot write to '{path}': it is a directory.", path=path)
        await asyncio.to_thread(_write_text, target, contents)
        self._log.debug("filesystem.write", path=path, length=len(contents))

    async def delete(self, path: str, *, idempotent: bool = False) -> None:
        target = self.resolve(path, "delete")
        if target == self.root:
            raise ExternalOperationError("delete", "Refusing to delete the sandbox root.", path=path)
        if not target.exists():
            if idempotent:
                return
            raise ExternalOperationError(
                "delete", f"File '{path}' could not be deleted because it was not found.", path=path
            )
        if target.is_dir():
            await asyncio.to_thread(shutil.rmtree, target)
        else:
            await asyncio.to_thread(target.unlink)
        self._log.debug("filesystem.delete", path=path)

    async def move(self, from_: str, to: str) -> None:
        source = self.resolve(from_, "move")
        destination = self.resolve(to, "move")
        self._require_exists(source, from_, "move")
        self._require_parent(destination, to, "move")
        await asyncio.to_thread(self._replace, source, destination, False)
        self._log.debug("filesystem.move", source=from_, destination=to)

    async def copy(self, from_: str, to: str) -> None:
        source = self.resolve(from_, "copy")
        destination = self.resolve(to, "copy")
        self._require_exists(source, from_, "copy")
        self._require_parent(destination, to, "copy")
        await asyncio.to_thread(self._replace, source, destination, True)
        self._log.debug("filesystem.copy", source=from_, destination=to)

    def _replace(self, source: Path, destination: Path, keep_source: bool) -> None:
        if source == destination:
            return
        if destination.is_dir():
            shutil.rmtree(destination)
        if keep_source:
            if source.is_dir():
                shutil.copytree(source, destination)
            else:
                shutil.copy2(source, destination)
        else:
            os.replace(source, destination)

    async def make_directory(self, path: str, *, intermediates: bool = False) -> None:
        target = self.resolve(path, "make_directory")
        if target.exists() and not (intermediates and target.is_dir()):
            raise ExternalOperationError("make_directory", f"Directory '{path}' could not be created because it already exists.", path=path)
        if not intermediates:
            self._require_parent(target, path, "make_directory")
        await asyncio.to_thread(target.mkdir, parents=intermediates, exist_ok=intermediates)

    async def read_directory(self, path: str) -> List[str]:
        target = self.resolve(path, "read_directory")
        if not target.is_dir():
            reason = "is not a directory" if target.exists() else "was not found"
            raise ExternalOperationError("read_directory", f"Directory '{path}' could not be read because it {reason}.", path=path)
        return sorted(await asyncio.to_thread(os.listdir, target))

    async def download(self, url: str, path: str, *, md5: bool = False) -> DownloadResult:
        target = self.resolve(path, "download")
        self._require_parent(target, path, "download")
        partial = target.with_name(f".{target.name}.part")
        digest = hashlib.md5()
        log = self._log.bind(url=url, path=path)
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                follow_redirects=True,
                timeout=httpx.Timeout(self._download_timeout),
            ) as client:
                async with client.stream("GET", url) as response:
                    with partial.open("wb") as handle:
                        async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                            handle.write(chunk)
                            digest.update(chunk)
                    status = response.status_code
                    headers = dict(response.headers)
        except httpx.TimeoutException as exc:
            partial.unlink(missing_ok=True)
            log.error("filesystem.download_timeout")
            raise ExternalOperationError("download", f"Download of '{url}' timed out.", path=path) from exc
        except httpx.HTTPError as exc:
            partial.unlink(missing_ok=True)
            log.error("filesystem.download_failed", error=str(exc))
            raise ExternalOperationError("download", f"Unable to download '{url}': {exc}", path=path) from exc
        os.replace(partial, target)
        log.debug("filesystem.download", status=status)
        return DownloadResult(
            uri=self.uri_for(target),
            status=status,
            headers=headers,
            md5=digest.hexdigest() if md5 else None,
        )

    # -- checks -------------------------------------------------------------

    def _require_exists(self, target: Path, path: str, operation: str) -> None:
        if not target.exists():
            raise ExternalOperationError(operation, f"File '{path}' was not found.", path=path)

    def _require_parent(self, target: Path, path: str, operation: str) -> None:
        if not target.parent.is_dir():
            raise ExternalOperationError(
                operation, f"Directory for '{path}' doesn't exist. Create it with make_directory first.", path=path
            )


def _read_text(path: Path) -> str:
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def _write_text(path: Path, contents: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(contents)


def _md5_of(path: Path) -> str:
    digest = hashlib.md5()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
