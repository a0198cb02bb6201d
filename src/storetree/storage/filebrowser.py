"""Page fetchers backed by the filebrowser HTTP API.

    Every storage kind is served by the same API under a different view prefix,
    so each fetcher only needs to supply its prefix. Listings are requested sorted
    by name, which the deep walk relies on to stop paging early.
"""
import typing as t
from urllib.parse import quote

import requests
import zirconium as zr
import zrlog
from autoinject import injector

from .base import BasePageFetcher, PageRequest, ListingPage, HardFetchError, wrap_request_errors
from .kinds import StorageKind


class FileBrowserFetcher(BasePageFetcher):
    """Fetch listings and previews through the filebrowser view endpoint."""

    config: zr.ApplicationConfig = None

    url_prefix: str = None

    @injector.construct
    def __init__(self, base_url: t.Optional[str] = None, timeout: t.Optional[float] = None, auth_token: t.Optional[str] = None):
        self._base_url = (base_url or self.config.as_str(("storetree", "api", "base_url"), default="http://localhost:8888")).rstrip('/ ')
        self._timeout = timeout or float(self.config.get(("storetree", "api", "timeout"), default=30))
        self._auth_token = auth_token or self.config.as_str(("storetree", "api", "auth_token"), default=None)
        self._log = zrlog.get_logger(f"storetree.fetch.{self.kind.value}")

    def view_url(self, segments: list[str]) -> str:
        """Build the view URL for the given path segments."""
        return f"{self._base_url}{self.url_prefix}{quote('/'.join(segments), safe='/')}"

    def _headers(self) -> dict:
        headers = {'Accept': 'application/json'}
        if self._auth_token:
            headers['Authorization'] = f'bearer {self._auth_token}'
        return headers

    def _get_json(self, url: str, params: dict) -> dict:
        self._log.debug(f"GET {url} {params}")
        response = requests.get(url, params=params, headers=self._headers(), timeout=self._timeout)
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise HardFetchError(f"Unexpected response body from [{url}]", 2007)
        if 'error' in body:
            raise HardFetchError(f"{body['error']}", 2008)
        return body

    @wrap_request_errors
    def _fetch_page(self, request: PageRequest) -> ListingPage:
        params = {
            'format': 'json',
            'sortby': 'name',
            'descending': 'false',
            'pagesize': request.page_size,
            'pagenum': request.page,
        }
        if request.filter_text:
            params['filter'] = request.filter_text
        return ListingPage.from_dict(self._get_json(self.view_url(request.segments), params))

    @wrap_request_errors
    def _fetch_preview(self, segments: list[str]) -> dict:
        params = {
            'format': 'json',
            'compression': 'none',
            'mode': 'text',
        }
        return self._get_json(self.view_url(segments), params)


class HDFSFetcher(FileBrowserFetcher):

    kind = StorageKind.HDFS
    url_prefix = "/filebrowser/view=/"


class S3Fetcher(FileBrowserFetcher):

    kind = StorageKind.S3
    url_prefix = "/filebrowser/view=S3A://"


class ADLSFetcher(FileBrowserFetcher):

    kind = StorageKind.ADLS
    url_prefix = "/filebrowser/view=adl:/"


class ABFSFetcher(FileBrowserFetcher):

    kind = StorageKind.ABFS
    url_prefix = "/filebrowser/view=ABFS://"


class OFSFetcher(FileBrowserFetcher):

    kind = StorageKind.OFS
    url_prefix = "/filebrowser/view=ofs://"
