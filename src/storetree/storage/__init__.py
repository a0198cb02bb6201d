"""
    Provides access to the listings of the supported storage backends.

    Each backend (HDFS, S3, ADLS, ABFS, OFS) is identified by a StorageKind. The
    FetcherController supplies one page fetcher per kind; a fetcher turns a
    PageRequest (kind, path segments, page number, page size, filter) into a
    ListingPage of entries plus a continuation page number.

    The ConnectorRegistry records which kinds are available and what the root
    path of each one is. Both are global injectables.

    Listings are expected to be sorted by name. Nothing here checks that, but the
    deep path walk in storetree.tree depends on it to avoid reading whole
    directories.
"""
from .kinds import StorageKind, canonical_kind
from .base import (
    BasePageFetcher,
    EntryKind,
    HardFetchError,
    ListingEntry,
    ListingPage,
    PageRequest,
    StorageError,
)
from .core import ConnectorRegistry, FetcherController
