import typing as t

from storetree.storage import BasePageFetcher, EntryKind, ListingEntry, ListingPage, PageRequest, StorageKind


def dirs(*names) -> list[ListingEntry]:
    return [ListingEntry(n, EntryKind.DIR) for n in names]


def files(*names) -> list[ListingEntry]:
    return [ListingEntry(n, EntryKind.FILE, url=f"/view/{n}") for n in names]


class FakeFetcher(BasePageFetcher):
    """In-memory backend keyed by the joined path segments."""

    kind = StorageKind.HDFS

    def __init__(self, listings: t.Optional[dict[str, list[ListingEntry]]] = None):
        self.listings = listings or {}
        self.requests: list[PageRequest] = []
        self.preview_requests: list[list[str]] = []
        self.failures: dict[tuple[str, int], t.Union[Exception, str]] = {}
        self.soft_errors: dict[tuple[str, int], str] = {}
        self.endless = False

    def _fetch_page(self, request: PageRequest) -> ListingPage:
        self.requests.append(request)
        key = '/'.join(request.segments)
        failure = self.failures.get((key, request.page))
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return ListingPage([], 0, failure)
        entries = self.listings.get(key, [])
        if request.filter_text:
            entries = [x for x in entries if request.filter_text in x.name]
        soft_error = self.soft_errors.get((key, request.page))
        if self.endless:
            return ListingPage(list(entries), request.page + 1, soft_error)
        start = (request.page - 1) * request.page_size
        end = start + request.page_size
        next_page = request.page + 1 if end < len(entries) else 0
        return ListingPage(list(entries[start:end]), next_page, soft_error)

    def _fetch_preview(self, segments: list[str]) -> dict:
        self.preview_requests.append(segments)
        key = '/'.join(segments)
        failure = self.failures.get((key, 0))
        if isinstance(failure, Exception):
            raise failure
        return {'view': {'contents': f"contents of {key}"}}
