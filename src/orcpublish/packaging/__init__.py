"""Package transport: blob store adapters, fetch/unpack, metadata parsing, writing."""

from orcpublish.packaging.blobstore import BlobLocator, BlobStore, HttpBlobStore, LocalBlobStore
from orcpublish.packaging.fetcher import DEFAULT_ORC_NAME, PackageFetcher, generate_io_path, unzip
from orcpublish.packaging.metadata import FLOW_ZIP, MetadataImporter, OrchestratorDescriptor
from orcpublish.packaging.writer import PackageWriter

__all__ = [
    "BlobLocator",
    "BlobStore",
    "DEFAULT_ORC_NAME",
    "FLOW_ZIP",
    "HttpBlobStore",
    "LocalBlobStore",
    "MetadataImporter",
    "OrchestratorDescriptor",
    "PackageFetcher",
    "PackageWriter",
    "generate_io_path",
    "unzip",
]
