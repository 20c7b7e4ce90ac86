"""PackageWriter — bundle orchestrator descriptors and a flow into a package zip.

The inverse of fetch + parse: writes ``orc_meta/orchestrator_info.json`` and
``orc_flow.zip`` into one archive that :class:`~orcpublish.packaging.metadata.MetadataImporter`
reads back. Used by ``orcpublish pack`` and by the test-suite.
"""

from __future__ import annotations

import io
import json
import zipfile
from collections.abc import Sequence
from dataclasses import asdict
from pathlib import Path
from typing import Any

from orcpublish.catalog.models import OrchestratorInfo
from orcpublish.core.logging import get_logger
from orcpublish.packaging.metadata import FLOW_ZIP, META_DIR, META_FILE

logger = get_logger(__name__)

# Identity and bookkeeping fields are not part of an exported descriptor.
_EXPORT_EXCLUDE = {"id", "creator", "create_time", "update_user", "update_time"}


def _descriptor_dict(info: OrchestratorInfo | dict[str, Any]) -> dict[str, Any]:
    data = asdict(info) if isinstance(info, OrchestratorInfo) else dict(info)
    return {k: v for k, v in data.items() if k not in _EXPORT_EXCLUDE and v is not None}


def _zip_directory(directory: Path) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(directory.rglob("*")):
            if path.is_file():
                zf.write(path, path.relative_to(directory).as_posix())
    return buf.getvalue()


class PackageWriter:
    """Build package archives."""

    def build(
        self,
        descriptors: Sequence[OrchestratorInfo | dict[str, Any]],
        flow: str | Path | bytes,
        destination: str | Path,
    ) -> Path:
        """Write a package to *destination* and return its path.

        Args:
            descriptors: One or more orchestrator descriptors; the first is
                the one an import operates on.
            flow: Flow sub-artifact as raw zip bytes, an existing ``.zip``
                file, or a directory to be zipped.
            destination: Output ``.zip`` path.
        """
        if not descriptors:
            raise ValueError("At least one descriptor is required")

        if isinstance(flow, bytes):
            flow_bytes = flow
        else:
            flow_path = Path(flow)
            flow_bytes = _zip_directory(flow_path) if flow_path.is_dir() else flow_path.read_bytes()

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        meta = json.dumps([_descriptor_dict(d) for d in descriptors], indent=2, default=str)

        with zipfile.ZipFile(destination, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(f"{META_DIR}/{META_FILE}", meta)
            zf.writestr(FLOW_ZIP, flow_bytes)

        logger.info("package_built", path=str(destination), orchestrators=len(descriptors))
        return destination
