"""Lazily loaded storage tree entries.

    A StorageEntry is one file or directory of a storage backend. Children are
    loaded a page at a time through the page fetcher of the entry's storage kind:
    load_page() replaces the loaded children with one page, fetch_more() appends
    the next page. Failures never raise out of the entry; they are recorded in
    has_error / error_text for display.

    The path of an entry is always computed from its ancestors, so it cannot
    drift from the tree structure.
"""
from __future__ import annotations

import enum
import typing as t

import zrlog

from storetree.storage import (
    BasePageFetcher,
    EntryKind,
    ListingEntry,
    ListingPage,
    PageRequest,
    StorageKind,
)
from storetree.storage.base import DEFAULT_PAGE_SIZE
from storetree.util import StoreTreeError, join_path, split_path
from . import events as ev


HIDDEN_NAMES = ('.', '..')


class LoadingState(enum.Enum):

    IDLE = "idle"
    LOADING_INITIAL = "loading_initial"
    LOADING_MORE = "loading_more"


class StorageEntry:
    """A node of the storage tree.

        The root of a tree is built from the connector's root path (as a
        directory named after it, with no parent); all other entries are
        created from listing pages and belong to their parent.
    """

    def __init__(self,
                 definition: ListingEntry,
                 kind: StorageKind,
                 fetcher: BasePageFetcher,
                 parent: t.Optional[StorageEntry] = None,
                 root_path: str = '',
                 original_scheme: t.Optional[str] = None,
                 page_size: int = DEFAULT_PAGE_SIZE,
                 event_bus: t.Optional[ev.EventBus] = None,
                 name_order: str = "casefold"):
        if name_order not in NAME_ORDERS:
            raise ValueError(f"Unknown name order [{name_order}]")
        self.definition = definition
        self.kind = kind
        self.parent = parent
        self.root_path = root_path or ''
        self.original_scheme = original_scheme
        self.page_size = page_size
        self.name_order = name_order
        self._fetcher = fetcher
        self._event_bus = event_bus

        self.current_page = 1
        self.has_more_pages = True
        self.filter_text = ''
        self.children: list[StorageEntry] = []
        self.loaded = False
        self.loading = False
        self.loading_more = False
        self.has_error = False
        self.error_text: t.Optional[str] = None
        self.is_open = False
        self.preview: t.Optional[dict] = None

        self._listeners: list[t.Callable[[StorageEntry, str], None]] = []
        self._log = zrlog.get_logger("storetree.entry")

    def __repr__(self):
        return f"StorageEntry({self.kind.value}:{self.path!r}, {self.definition.entry_kind.value})"

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def is_dir(self) -> bool:
        return self.definition.entry_kind == EntryKind.DIR

    @property
    def path(self) -> str:
        if self.parent is None:
            return self.definition.name
        return join_path(self.parent.path, self.definition.name)

    @property
    def abfs_path(self) -> str:
        path = self.path
        return ('abfs:/' if path.startswith('/') else 'abfs://') + path

    @property
    def has_entries(self) -> bool:
        return len(self.children) > 0

    @property
    def loading_state(self) -> LoadingState:
        if self.loading:
            return LoadingState.LOADING_INITIAL
        if self.loading_more:
            return LoadingState.LOADING_MORE
        return LoadingState.IDLE

    def add_listener(self, callback: t.Callable[[StorageEntry, str], None]):
        """Call callback(entry, field_name) after every change to this entry's state."""
        self._listeners.append(callback)

    def remove_listener(self, callback: t.Callable[[StorageEntry, str], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, field_name: str):
        for callback in list(self._listeners):
            callback(self, field_name)

    def _set_error(self, error_text: t.Optional[str]):
        self.has_error = bool(error_text)
        self.error_text = error_text or None
        self._notify('error')

    def hierarchy(self) -> list[str]:
        """Path segments from the root of the backend down to this entry.

            The root entry's name is the connector root path, which can hold
            several segments (e.g. /user/hue).
        """
        parts = []
        entry = self
        while entry is not None:
            if entry.parent is None:
                parts.extend(reversed(split_path(entry.definition.name)))
            elif entry.definition.name:
                parts.append(entry.definition.name)
            entry = entry.parent
        parts.reverse()
        return parts

    def _page_request(self, page: int) -> PageRequest:
        return PageRequest(
            kind=self.kind,
            segments=self.hierarchy(),
            root_path=self.root_path,
            page=page,
            page_size=self.page_size,
            filter_text=self.filter_text.strip() or None,
        )

    def _build_children(self, page: ListingPage) -> list[StorageEntry]:
        return [
            StorageEntry(
                definition=file,
                kind=self.kind,
                fetcher=self._fetcher,
                parent=self,
                root_path=self.root_path,
                original_scheme=self.original_scheme,
                page_size=self.page_size,
                event_bus=self._event_bus,
                name_order=self.name_order,
            )
            for file in page.files
            if file.name not in HIDDEN_NAMES
        ]

    def _check_ordering(self, previous: list[StorageEntry], new_children: list[StorageEntry]):
        names = [x.name for x in previous[-1:]] + [x.name for x in new_children]
        for before, after in zip(names, names[1:]):
            if self.sorts_after(before, after):
                self._log.warning(f"Listing of [{self.path}] is not sorted by name ([{before}] before [{after}])")
                return

    async def load_page(self, page: int = 1) -> bool:
        """Load one page, replacing the current children.

            Does nothing if an initial load is already in flight. Returns True if
            the page was fetched (even with a soft listing error).
        """
        if self.loading:
            return False
        self.loading = True
        self.current_page = page
        self._set_error(None)
        self._notify('loading')
        try:
            result = await self._fetcher.fetch_page(self._page_request(page))
        except StoreTreeError as ex:
            self._log.warning(f"Could not load [{self.kind.value}:{self.path}] page {page}: {ex}")
            self._set_error(ex.message)
            return False
        finally:
            self.loading = False
            self._notify('loading')
        self.has_more_pages = result.next_page_number > page
        self.loaded = True
        new_children = self._build_children(result)
        self._check_ordering([], new_children)
        self.children = new_children
        self._notify('children')
        if result.soft_error:
            self._log.info(f"Listing of [{self.kind.value}:{self.path}] partially not allowed: {result.soft_error}")
            self._set_error(result.soft_error)
        return True

    async def fetch_more(self) -> bool:
        """Fetch the next page and append it to the children.

            Does nothing if there are no more pages or another page is already
            being fetched. Returns True if a page was fetched.
        """
        if not self.has_more_pages or self.loading_more:
            return False
        self.current_page += 1
        page = self.current_page
        self.loading_more = True
        self._set_error(None)
        self._notify('loading')
        try:
            result = await self._fetcher.fetch_page(self._page_request(page))
        except StoreTreeError as ex:
            self._log.warning(f"Could not load [{self.kind.value}:{self.path}] page {page}: {ex}")
            self.current_page -= 1
            self._set_error(ex.message)
            return False
        finally:
            self.loading_more = False
            self._notify('loading')
        self.has_more_pages = result.next_page_number > page
        new_children = self._build_children(result)
        self._check_ordering(self.children, new_children)
        self.children = self.children + new_children
        self._notify('children')
        if result.soft_error:
            self._log.info(f"Listing of [{self.kind.value}:{self.path}] page {page} partially not allowed: {result.soft_error}")
            self._set_error(result.soft_error)
        return True

    async def load_preview(self) -> bool:
        """Fetch the preview of a file entry."""
        self.loading = True
        self._notify('loading')
        try:
            self.preview = await self._fetcher.fetch_preview(self.hierarchy())
            self._notify('preview')
            return True
        except StoreTreeError as ex:
            self._log.warning(f"Could not load preview of [{self.kind.value}:{self.path}]: {ex}")
            self._set_error(ex.message)
            return False
        finally:
            self.loading = False
            self._notify('loading')

    async def open(self):
        """Mark the entry open and load its first page (or its preview, for files), unless already done."""
        if not self.is_open:
            self.is_open = True
            self._notify('is_open')
        if self.loading or (self.loaded and self.children):
            return
        if self.is_dir:
            await self.load_page(1)
        elif self.preview is None:
            await self.load_preview()

    async def set_filter(self, text: str):
        """Change the server-side filter; resets pagination and reloads the first page."""
        self.filter_text = text or ''
        self.current_page = 1
        self.has_more_pages = True
        self.loaded = False
        self.children = []
        self._notify('children')
        await self.load_page(1)

    async def toggle_open(self, new_tab: bool = False):
        if not self.is_dir:
            self._publish(ev.OPEN_LINK_NEW_TAB if new_tab else ev.OPEN_LINK, self.definition.url)
            return
        if self.is_open:
            self.is_open = False
            self._notify('is_open')
        else:
            await self.open()
        self._publish(ev.SELECT_ENTRY, self)

    def dbl_click(self):
        self._publish(ev.dbl_click_topic(self.kind), self)

    def go_home(self):
        self._publish(ev.GO_HOME, None)

    def open_in_importer(self):
        self._publish(ev.OPEN_IN_IMPORTER, self.definition.path)

    def sorts_after(self, name: str, target: str) -> bool:
        """Check if name comes strictly after target in the listing order of this tree."""
        return sorts_after(name, target, self.name_order)

    def _publish(self, topic: str, payload: t.Any):
        if self._event_bus is not None:
            self._event_bus.publish(topic, payload)


def collation_key(name: str) -> tuple[str, str]:
    """Case-insensitive name order, with ties broken by the exact name."""
    return name.casefold(), name


def codepoint_key(name: str) -> str:
    return name


# Values of storetree.name_order
NAME_ORDERS = {
    "casefold": collation_key,
    "codepoint": codepoint_key,
}

DEFAULT_NAME_ORDER = "casefold"


def sorts_after(name: str, target: str, name_order: str = DEFAULT_NAME_ORDER) -> bool:
    """Check if name comes strictly after target in the given listing order."""
    key = NAME_ORDERS[name_order]
    return key(name) > key(target)
