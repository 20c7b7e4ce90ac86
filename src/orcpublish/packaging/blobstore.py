"""
Blob store adapters — where packages and flow sub-artifacts live.

The pipeline talks to the store through the :class:`BlobStore` protocol:

* ``download(user, resource_id, version, dest_path)``
* ``upload(user, stream, file_name, project_name) -> BlobLocator``
* ``read_local_file(user, path) -> BinaryIO``

Two adapters ship here. :class:`HttpBlobStore` talks to a remote
resource service with ``httpx``; :class:`LocalBlobStore` keeps versioned
files under a directory and is used for development and tests.

Every failure surfaces as :class:`RetrievalError`. A missing resource or
version is not retryable; transport failures are.

Tags:
    orcpublish, blob-store, storage, httpx, adapter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Protocol, runtime_checkable

import httpx

from orcpublish.core.errors import RetrievalError
from orcpublish.core.logging import get_logger

logger = get_logger(__name__)

FIRST_BLOB_VERSION = "v000001"


@dataclass(frozen=True, slots=True)
class BlobLocator:
    """Address of one stored blob version."""

    resource_id: str
    version: str


@runtime_checkable
class BlobStore(Protocol):
    """Versioned blob storage used by the import pipeline. SYNC."""

    def download(self, user: str, resource_id: str, version: str, dest_path: Path) -> None:
        ...

    def upload(self, user: str, stream: BinaryIO, file_name: str, project_name: str) -> BlobLocator:
        ...

    def read_local_file(self, user: str, path: Path) -> BinaryIO:
        ...


class _LocalReadMixin:
    def read_local_file(self, user: str, path: Path) -> BinaryIO:
        """Open a file from the local scratch area for upload."""
        try:
            return Path(path).open("rb")
        except OSError as exc:
            raise RetrievalError(
                f"Cannot read local file {path}", retryable=False, cause=exc
            ).with_context(user=user) from exc


class LocalBlobStore(_LocalReadMixin):
    """Filesystem-backed store: ``<root>/<resource_id>/<version>/<file_name>``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def download(self, user: str, resource_id: str, version: str, dest_path: Path) -> None:
        version_dir = self.root / resource_id / version
        candidates = sorted(version_dir.glob("*")) if version_dir.is_dir() else []
        if not candidates:
            raise RetrievalError(
                f"Resource {resource_id} version {version} not found",
                retryable=False,
            ).with_context(user=user, resource_id=resource_id)
        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            shutil.copyfile(candidates[0], dest_path)
        except OSError as exc:
            raise RetrievalError(
                f"Failed to copy resource {resource_id}", cause=exc
            ).with_context(user=user, resource_id=resource_id) from exc
        logger.debug("blob_downloaded", resource_id=resource_id, version=version, dest=str(dest_path))

    def upload(self, user: str, stream: BinaryIO, file_name: str, project_name: str) -> BlobLocator:
        locator = BlobLocator(resource_id=uuid.uuid4().hex, version=FIRST_BLOB_VERSION)
        target = self.root / locator.resource_id / locator.version / Path(file_name).name
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("wb") as fh:
                shutil.copyfileobj(stream, fh)
        except OSError as exc:
            raise RetrievalError(f"Failed to store {file_name}", cause=exc).with_context(
                user=user, project=project_name
            ) from exc
        logger.debug("blob_uploaded", resource_id=locator.resource_id, file_name=file_name)
        return locator


class HttpBlobStore(_LocalReadMixin):
    """Remote resource service reached over HTTP.

    Endpoints (relative to ``base_url``):

    * ``GET  /download?resourceId=…&version=…`` → raw bytes
    * ``POST /upload`` (multipart ``file`` + ``projectName``) →
      ``{"data": {"resourceId": …, "version": …}}``
    """

    USER_HEADER = "Token-User"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def download(self, user: str, resource_id: str, version: str, dest_path: Path) -> None:
        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        params = {"resourceId": resource_id, "version": version}
        try:
            with self._client.stream(
                "GET", "/download", params=params, headers={self.USER_HEADER: user}
            ) as resp:
                if resp.status_code == 404:
                    raise RetrievalError(
                        f"Resource {resource_id} version {version} not found",
                        retryable=False,
                    )
                resp.raise_for_status()
                with dest_path.open("wb") as fh:
                    for chunk in resp.iter_bytes():
                        fh.write(chunk)
        except RetrievalError as exc:
            raise exc.with_context(user=user, resource_id=resource_id)
        except httpx.HTTPError as exc:
            raise RetrievalError(
                f"Blob store download failed: {exc}", cause=exc
            ).with_context(user=user, resource_id=resource_id) from exc

    def upload(self, user: str, stream: BinaryIO, file_name: str, project_name: str) -> BlobLocator:
        try:
            resp = self._client.post(
                "/upload",
                files={"file": (file_name, stream)},
                data={"projectName": project_name},
                headers={self.USER_HEADER: user},
            )
            resp.raise_for_status()
            payload: dict[str, Any] = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RetrievalError(f"Blob store upload failed: {exc}", cause=exc).with_context(
                user=user, project=project_name
            ) from exc

        data = payload.get("data", payload)
        try:
            return BlobLocator(resource_id=str(data["resourceId"]), version=str(data["version"]))
        except (KeyError, TypeError) as exc:
            raise RetrievalError(
                "Blob store upload response lacks resourceId/version", cause=exc
            ).with_context(user=user, project=project_name) from exc
