"""Pagination-aware descent from a root entry towards a path.

    Directories on real backends can hold hundreds of thousands of entries, so
    the walk never loads a directory in full just to find one child. Listings are
    sorted by name: once the last loaded child sorts after the name being looked
    for, later pages cannot contain it and the walk stops at that level. A hard
    limit on the number of pages fetched per level guarantees termination when
    a backend does not honour the ordering.

    A walk never fails because a path does not exist; it returns the deepest
    entry it could reach.
"""
import typing as t

import zirconium as zr
import zrlog
from autoinject import injector

from storetree.storage import FetcherController, ListingEntry, EntryKind, StorageKind
from storetree.storage.base import DEFAULT_PAGE_SIZE
from storetree.util import ConfigError, split_path
from .entry import DEFAULT_NAME_ORDER, NAME_ORDERS, StorageEntry
from .events import EventBus
from .resolver import PathResolver


DEFAULT_MAX_PAGES = 50


class DeepPathWalker:

    def __init__(self, max_pages: int = DEFAULT_MAX_PAGES):
        self.max_pages = max_pages
        self._log = zrlog.get_logger("storetree.walker")

    async def descend(self, node: StorageEntry, segments: list[str]) -> StorageEntry:
        """Walk down from node following segments; return the deepest entry reached."""
        remaining = list(segments)
        if node.parent is None:
            remaining = self._strip_root(node, remaining)
        while remaining:
            target = remaining.pop(0)
            child = await self._find_child(node, target)
            if child is None:
                self._log.debug(f"Stopped at [{node.path}], [{target}] not found")
                return node
            node = child
        return node

    @staticmethod
    def _strip_root(root: StorageEntry, segments: list[str]) -> list[str]:
        root_segments = split_path(root.definition.name)
        if root_segments and segments[:len(root_segments)] == root_segments:
            return segments[len(root_segments):]
        return segments

    async def _find_child(self, node: StorageEntry, target: str) -> t.Optional[StorageEntry]:
        """Find the child named target, fetching more pages while it may still show up."""
        pages_fetched = 0
        if not node.loaded:
            pages_fetched += 1
            if not await node.load_page(1):
                return None
        while True:
            matches = [x for x in node.children if x.name == target]
            if len(matches) == 1:
                return matches[0]
            if len(matches) > 1:
                self._log.warning(f"[{node.path}] lists [{target}] {len(matches)} times, treating it as not found")
            passed = bool(node.children) and node.sorts_after(node.children[-1].name, target)
            if passed or not node.has_more_pages:
                return None
            if pages_fetched >= self.max_pages:
                self._log.debug(f"Page limit reached in [{node.path}] looking for [{target}]")
                return None
            pages_fetched += 1
            if not await node.fetch_more():
                return None


@injector.inject
async def get_entry(path: str,
                    kind: t.Union[StorageKind, str, None] = None,
                    resolver: PathResolver = None,
                    fetchers: FetcherController = None,
                    event_bus: EventBus = None,
                    config: zr.ApplicationConfig = None) -> StorageEntry:
    """Build a tree for the storage backend of path and load it down to path.

        The path may include the storage type (e.g. '/tmp', 's3a://bucket/tmp').
        If it does not, kind is used, and HDFS if kind is not given either.
        Raises UnresolvedConnector if there is no connector for the storage type;
        otherwise returns the entry for path or, if part of it does not exist,
        the deepest entry that does.
    """
    name_order = config.as_str(("storetree", "name_order"), default=DEFAULT_NAME_ORDER)
    if name_order not in NAME_ORDERS:
        raise ConfigError("storetree.name_order", f"expected one of {', '.join(NAME_ORDERS)}", 1002)
    resolved = resolver.resolve(path, kind)
    root = StorageEntry(
        definition=ListingEntry(resolved.root_path, EntryKind.DIR),
        kind=resolved.kind,
        fetcher=fetchers.get_fetcher(resolved.kind),
        root_path=resolved.root_path,
        original_scheme=resolved.original_scheme,
        page_size=int(config.get(("storetree", "page_size"), default=DEFAULT_PAGE_SIZE)),
        event_bus=event_bus,
        name_order=name_order,
    )
    walker = DeepPathWalker(int(config.get(("storetree", "max_deep_pages"), default=DEFAULT_MAX_PAGES)))
    return await walker.descend(root, resolved.segments)
