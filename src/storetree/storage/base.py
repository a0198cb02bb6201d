from __future__ import annotations
import asyncio
import enum
import functools
import json
import typing as t

import requests

from storetree.util import StoreTreeError
from .kinds import StorageKind


DEFAULT_PAGE_SIZE = 100


class EntryKind(enum.Enum):
    """Type of an entry in a storage listing."""

    FILE = "file"
    DIR = "dir"


class StorageError(StoreTreeError):
    """Error class specifically for storage errors."""

    def __init__(self, msg, code, is_recoverable: bool = False):
        super().__init__(msg, "STORAGE", code, is_recoverable=is_recoverable)


class HardFetchError(StorageError):
    """Transport or backend failure while fetching a listing or a preview."""
    pass


def wrap_request_errors(cb):
    """Converts transport and decoding errors into HardFetchErrors with recoverable set properly."""

    @functools.wraps(cb)
    def _inner(*args, **kwargs):
        try:
            return cb(*args, **kwargs)
        except StoreTreeError:
            raise
        except requests.Timeout as ex:
            raise HardFetchError(f"Request timed out: {str(ex)}", 2001, True) from ex
        except requests.ConnectionError as ex:
            raise HardFetchError(f"Connection error: {str(ex)}", 2002, True) from ex
        except requests.HTTPError as ex:
            status = ex.response.status_code if ex.response is not None else None
            if status in (401, 403):
                raise HardFetchError(f"Access denied: {str(ex)}", 2003) from ex
            elif status == 404:
                raise HardFetchError(f"Path not found: {str(ex)}", 2004) from ex
            raise HardFetchError(f"HTTP error: {str(ex)}", 2005, status is not None and status >= 500) from ex
        except json.JSONDecodeError as ex:
            raise HardFetchError(f"Malformed response: {str(ex)}", 2006) from ex
        except requests.RequestException as ex:
            raise HardFetchError(f"Request failed: {ex.__class__.__name__}: {str(ex)}", 2000) from ex
        except (ValueError, KeyError, TypeError) as ex:
            raise HardFetchError(f"Malformed response: {ex.__class__.__name__}: {str(ex)}", 2006) from ex

    return _inner


class ListingEntry:
    """One record of a backend listing."""

    def __init__(self,
                 name: str,
                 entry_kind: EntryKind = EntryKind.DIR,
                 path: t.Optional[str] = None,
                 url: t.Optional[str] = None,
                 size: t.Optional[int] = None,
                 mtime: t.Optional[int] = None,
                 extra: t.Optional[dict] = None):
        self.name = name
        self.entry_kind = entry_kind
        self.path = path
        self.url = url
        self.size = size
        self.mtime = mtime
        self.extra = extra or {}

    @property
    def is_dir(self) -> bool:
        return self.entry_kind == EntryKind.DIR

    def __repr__(self):
        return f"ListingEntry({self.name!r}, {self.entry_kind.value})"

    @staticmethod
    def from_dict(record: dict) -> ListingEntry:
        """Build an entry from a deserialized listing record."""
        stats = record.get('stats') or {}
        extra = {k: record[k] for k in record if k not in ('name', 'type', 'path', 'url', 'stats')}
        return ListingEntry(
            name=record['name'],
            entry_kind=EntryKind.FILE if record.get('type') == 'file' else EntryKind.DIR,
            path=record.get('path'),
            url=record.get('url'),
            size=stats.get('size'),
            mtime=stats.get('mtime'),
            extra=extra
        )


class ListingPage:
    """One page of child entries plus the continuation information."""

    def __init__(self, files: list[ListingEntry], next_page_number: int = 0, soft_error: t.Optional[str] = None):
        self.files = files
        self.next_page_number = next_page_number
        self.soft_error = soft_error

    @staticmethod
    def from_dict(body: dict) -> ListingPage:
        """Build a page from a deserialized listing response."""
        page_info = body.get('page') or {}
        return ListingPage(
            files=[ListingEntry.from_dict(x) for x in body.get('files') or []],
            next_page_number=int(page_info.get('next_page_number') or 0),
            soft_error=body.get('s3_listing_not_allowed') or None
        )


class PageRequest:
    """Coordinates of one listing page."""

    def __init__(self,
                 kind: StorageKind,
                 segments: list[str],
                 root_path: str = '',
                 page: int = 1,
                 page_size: int = DEFAULT_PAGE_SIZE,
                 filter_text: t.Optional[str] = None):
        self.kind = kind
        self.segments = segments
        self.root_path = root_path
        self.page = page
        self.page_size = page_size
        self.filter_text = filter_text

    def __repr__(self):
        return f"PageRequest({self.kind.value}:/{'/'.join(self.segments)}, page={self.page}, size={self.page_size}, filter={self.filter_text!r})"


class BasePageFetcher:
    """Fetches listing pages and previews from one storage kind.

        Subclasses implement the blocking _fetch_page() and _fetch_preview()
        methods; the async wrappers run them in a worker thread.
    """

    kind: StorageKind = None

    async def fetch_page(self, request: PageRequest) -> ListingPage:
        """Fetch one page of child entries. Raises HardFetchError on failure."""
        return await asyncio.to_thread(self._fetch_page, request)

    def _fetch_page(self, request: PageRequest) -> ListingPage:
        raise NotImplementedError

    async def fetch_preview(self, segments: list[str]) -> dict:
        """Fetch the content preview of a file. Raises HardFetchError on failure."""
        return await asyncio.to_thread(self._fetch_preview, segments)

    def _fetch_preview(self, segments: list[str]) -> dict:
        raise NotImplementedError
