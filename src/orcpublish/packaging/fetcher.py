"""Package fetcher — download a package blob and unpack it into scratch space.

The scratch tree of one fetch is::

    <scratch_root>/<user>/<YYYYMMDD>/<project>/<HHMMSS>_<token>/default_orc.zip
    <scratch_root>/<user>/<YYYYMMDD>/<project>/<HHMMSS>_<token>/default_orc/

:meth:`PackageFetcher.fetch` is a context manager; the per-call directory is
removed on every exit path, including cancellation.
"""

from __future__ import annotations

import shutil
import uuid
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from orcpublish.core.errors import MalformedPackageError
from orcpublish.core.logging import get_logger
from orcpublish.packaging.blobstore import BlobStore

logger = get_logger(__name__)

DEFAULT_ORC_NAME = "default_orc"


def _safe_segment(value: str) -> str:
    cleaned = "".join(c if c.isalnum() or c in "-_." else "_" for c in value.strip())
    return cleaned.strip(".") or "_"


def generate_io_path(
    scratch_root: str | Path,
    user: str,
    project_name: str,
    file_name: str,
    *,
    now: datetime | None = None,
) -> Path:
    """Scratch path for *file_name* of one import by *user* into *project_name*."""
    now = now or datetime.now()
    call_dir = f"{now:%H%M%S}_{uuid.uuid4().hex[:8]}"
    return (
        Path(scratch_root)
        / _safe_segment(user)
        / f"{now:%Y%m%d}"
        / _safe_segment(project_name)
        / call_dir
        / file_name
    )


def unzip(zip_path: str | Path, destination: str | Path | None = None) -> Path:
    """Extract *zip_path* next to itself (``x.zip`` → ``x/``) and return the directory.

    Raises:
        MalformedPackageError: The file is not a zip, or a member would land
            outside the destination directory.
    """
    zip_path = Path(zip_path)
    target = Path(destination) if destination is not None else zip_path.with_suffix("")
    target.mkdir(parents=True, exist_ok=True)
    root = target.resolve()
    try:
        with zipfile.ZipFile(zip_path) as zf:
            for member in zf.namelist():
                resolved = (root / member).resolve()
                if resolved != root and root not in resolved.parents:
                    raise MalformedPackageError(f"Archive member escapes package directory: {member}")
            zf.extractall(root)
    except zipfile.BadZipFile as exc:
        raise MalformedPackageError(f"Not a valid package archive: {zip_path.name}", cause=exc) from exc
    return target


class PackageFetcher:
    """Download + unpack with guaranteed scratch cleanup."""

    def __init__(self, blob_store: BlobStore, scratch_root: str | Path) -> None:
        self.blob_store = blob_store
        self.scratch_root = Path(scratch_root)

    @contextmanager
    def fetch(
        self,
        user: str,
        project_name: str,
        resource_id: str,
        version: str,
    ) -> Iterator[Path]:
        """Yield the unpacked package directory; scratch files are removed on exit."""
        zip_path = generate_io_path(self.scratch_root, user, project_name, f"{DEFAULT_ORC_NAME}.zip")
        call_dir = zip_path.parent
        call_dir.mkdir(parents=True, exist_ok=True)
        try:
            self.blob_store.download(user, resource_id, version, zip_path)
            unpacked = unzip(zip_path)
            logger.debug("package_unpacked", resource_id=resource_id, version=version, path=str(unpacked))
            yield unpacked
        finally:
            shutil.rmtree(call_dir, ignore_errors=True)
            logger.debug("package_scratch_removed", path=str(call_dir))
