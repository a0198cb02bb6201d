import unittest as ut
from unittest import mock

import requests

from storetree.storage import EntryKind, HardFetchError, PageRequest, StorageKind
from storetree.storage.filebrowser import ABFSFetcher, HDFSFetcher, S3Fetcher


def json_response(body, status: int = 200):
    response = mock.MagicMock()
    response.status_code = status
    response.json.return_value = body
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error", response=response)
    return response


LISTING = {
    'files': [
        {'name': '..', 'type': 'dir', 'path': '/', 'url': '/filebrowser/view=/'},
        {'name': 'data', 'type': 'dir', 'path': '/tmp/data', 'url': '/filebrowser/view=/tmp/data', 'stats': {'size': 0, 'mtime': 1700000000}},
        {'name': 'a.csv', 'type': 'file', 'path': '/tmp/a.csv', 'url': '/filebrowser/view=/tmp/a.csv', 'stats': {'size': 120, 'mtime': 1700000001}, 'rwx': '-rw-r--r--'},
    ],
    'page': {'number': 1, 'next_page_number': 2, 'num_pages': 3},
}


class TestFileBrowserFetcher(ut.TestCase):

    def setUp(self):
        self.fetcher = HDFSFetcher(base_url="http://hue.test/", timeout=5)

    def test_defaults_from_config(self):
        fetcher = HDFSFetcher()
        self.assertEqual(fetcher.view_url(["tmp"]), "http://filebrowser.test/filebrowser/view=/tmp")
        self.assertEqual(fetcher._timeout, 5)

    def test_view_urls(self):
        self.assertEqual(self.fetcher.view_url([]), "http://hue.test/filebrowser/view=/")
        self.assertEqual(self.fetcher.view_url(["tmp", "my dir"]), "http://hue.test/filebrowser/view=/tmp/my%20dir")
        self.assertEqual(S3Fetcher(base_url="http://hue.test").view_url(["bucket", "key"]), "http://hue.test/filebrowser/view=S3A://bucket/key")
        self.assertEqual(ABFSFetcher(base_url="http://hue.test").view_url(["acct", "dir"]), "http://hue.test/filebrowser/view=ABFS://acct/dir")

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_fetch_page(self, get):
        get.return_value = json_response(LISTING)
        page = self.fetcher._fetch_page(PageRequest(StorageKind.HDFS, ["tmp"], page=1, page_size=100))
        get.assert_called_once()
        args, kwargs = get.call_args
        self.assertEqual(args[0], "http://hue.test/filebrowser/view=/tmp")
        self.assertEqual(kwargs['params'], {
            'format': 'json',
            'sortby': 'name',
            'descending': 'false',
            'pagesize': 100,
            'pagenum': 1,
        })
        self.assertEqual(kwargs['timeout'], 5)
        self.assertEqual(page.next_page_number, 2)
        self.assertIsNone(page.soft_error)
        self.assertEqual([x.name for x in page.files], ['..', 'data', 'a.csv'])
        self.assertIs(page.files[2].entry_kind, EntryKind.FILE)
        self.assertEqual(page.files[2].size, 120)
        self.assertEqual(page.files[2].extra, {'rwx': '-rw-r--r--'})

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_filter_and_auth(self, get):
        get.return_value = json_response({'files': []})
        fetcher = HDFSFetcher(base_url="http://hue.test", auth_token="abc")
        page = fetcher._fetch_page(PageRequest(StorageKind.HDFS, [], page=3, page_size=10, filter_text="foo"))
        kwargs = get.call_args[1]
        self.assertEqual(kwargs['params']['filter'], "foo")
        self.assertEqual(kwargs['params']['pagenum'], 3)
        self.assertEqual(kwargs['headers']['Authorization'], "bearer abc")
        self.assertEqual(page.next_page_number, 0)
        self.assertEqual(page.files, [])

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_soft_error(self, get):
        get.return_value = json_response({'files': [], 's3_listing_not_allowed': "Bucket listing is not allowed"})
        page = self.fetcher._fetch_page(PageRequest(StorageKind.S3, []))
        self.assertEqual(page.soft_error, "Bucket listing is not allowed")

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_error_body(self, get):
        get.return_value = json_response({'error': "Cannot access: /secret"})
        with self.assertRaises(HardFetchError) as ctx:
            self.fetcher._fetch_page(PageRequest(StorageKind.HDFS, ["secret"]))
        self.assertEqual(ctx.exception.internal_code, "STORAGE-2008")
        self.assertEqual(ctx.exception.message, "Cannot access: /secret")

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_non_dict_body(self, get):
        get.return_value = json_response(["nope"])
        with self.assertRaises(HardFetchError) as ctx:
            self.fetcher._fetch_page(PageRequest(StorageKind.HDFS, []))
        self.assertEqual(ctx.exception.internal_code, "STORAGE-2007")

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_connection_error_is_recoverable(self, get):
        get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(HardFetchError) as ctx:
            self.fetcher._fetch_page(PageRequest(StorageKind.HDFS, []))
        self.assertTrue(ctx.exception.is_recoverable)
        self.assertEqual(ctx.exception.internal_code, "STORAGE-2002")

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_timeout_is_recoverable(self, get):
        get.side_effect = requests.Timeout("slow")
        with self.assertRaises(HardFetchError) as ctx:
            self.fetcher._fetch_page(PageRequest(StorageKind.HDFS, []))
        self.assertTrue(ctx.exception.is_recoverable)
        self.assertEqual(ctx.exception.internal_code, "STORAGE-2001")

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_http_errors(self, get):
        for status, code, recoverable in ((404, "STORAGE-2004", False), (403, "STORAGE-2003", False), (503, "STORAGE-2005", True), (400, "STORAGE-2005", False)):
            with self.subTest(status=status):
                get.return_value = json_response({}, status)
                with self.assertRaises(HardFetchError) as ctx:
                    self.fetcher._fetch_page(PageRequest(StorageKind.HDFS, ["x"]))
                self.assertEqual(ctx.exception.internal_code, code)
                self.assertEqual(ctx.exception.is_recoverable, recoverable)

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_malformed_listing(self, get):
        get.return_value = json_response({'files': [{'type': 'dir'}]})
        with self.assertRaises(HardFetchError) as ctx:
            self.fetcher._fetch_page(PageRequest(StorageKind.HDFS, []))
        self.assertEqual(ctx.exception.internal_code, "STORAGE-2006")

    @mock.patch("storetree.storage.filebrowser.requests.get")
    def test_preview(self, get):
        get.return_value = json_response({'view': {'contents': "a,b\n1,2"}})
        preview = self.fetcher._fetch_preview(["tmp", "a.csv"])
        self.assertEqual(preview['view']['contents'], "a,b\n1,2")
        kwargs = get.call_args[1]
        self.assertEqual(kwargs['params']['mode'], 'text')
        self.assertEqual(get.call_args[0][0], "http://hue.test/filebrowser/view=/tmp/a.csv")


class TestFileBrowserFetcherAsync(ut.IsolatedAsyncioTestCase):

    @mock.patch("storetree.storage.filebrowser.requests.get")
    async def test_fetch_page(self, get):
        get.return_value = json_response(LISTING)
        fetcher = HDFSFetcher(base_url="http://hue.test")
        page = await fetcher.fetch_page(PageRequest(StorageKind.HDFS, ["tmp"]))
        self.assertEqual(len(page.files), 3)

    @mock.patch("storetree.storage.filebrowser.requests.get")
    async def test_fetch_page_error(self, get):
        get.side_effect = requests.ConnectionError("refused")
        fetcher = HDFSFetcher(base_url="http://hue.test")
        with self.assertRaises(HardFetchError):
            await fetcher.fetch_page(PageRequest(StorageKind.HDFS, []))
