import typing as t

import zirconium as zr
import zrlog
from autoinject import injector

from storetree.util import ConfigError
from .base import BasePageFetcher
from .filebrowser import HDFSFetcher, S3Fetcher, ADLSFetcher, ABFSFetcher, OFSFetcher
from .kinds import StorageKind, canonical_kind


DEFAULT_ROOT_PATHS = {
    StorageKind.HDFS: "/",
    StorageKind.S3: "",
    StorageKind.ADLS: "",
    StorageKind.ABFS: "",
    StorageKind.OFS: "",
}


@injector.injectable_global
class ConnectorRegistry:
    """Knows which storage kinds have a connector and what their root path is.

        Reads the [storetree.connectors] table, one sub-table per kind:

            [storetree.connectors.hdfs]
            root_path = "/user/hue"

            [storetree.connectors.s3]
            enabled = false

        Without that table, every kind is enabled with its default root path.
    """

    config: zr.ApplicationConfig = None

    @injector.construct
    def __init__(self):
        self._log = zrlog.get_logger("storetree.connectors")
        self._root_paths: dict[StorageKind, str] = {}
        self._load_config()

    def _load_config(self):
        connectors = self.config.as_dict(("storetree", "connectors"), default=None)
        if connectors is None:
            self._root_paths = dict(DEFAULT_ROOT_PATHS)
            return
        for key in connectors:
            kind = canonical_kind(key)
            if kind is None:
                raise ConfigError(f"storetree.connectors.{key}", "unknown storage kind", 1000)
            settings = connectors[key] or {}
            if not isinstance(settings, dict):
                raise ConfigError(f"storetree.connectors.{key}", "expected a table", 1001)
            if not settings.get("enabled", True):
                self._log.debug(f"Connector [{kind.value}] disabled")
                continue
            self._root_paths[kind] = str(settings.get("root_path", DEFAULT_ROOT_PATHS[kind]))

    def root_path_for(self, kind: StorageKind) -> t.Optional[str]:
        """Get the root path of the connector for the given kind, or None if there is no connector."""
        return self._root_paths.get(kind)

    def has_connector(self, kind: StorageKind) -> bool:
        return kind in self._root_paths

    def register(self, kind: StorageKind, root_path: str):
        self._root_paths[kind] = root_path

    def unregister(self, kind: StorageKind):
        self._root_paths.pop(kind, None)

    def connectors(self) -> t.Iterable[tuple[StorageKind, str]]:
        for kind in StorageKind:
            if kind in self._root_paths:
                yield kind, self._root_paths[kind]


@injector.injectable_global
class FetcherController:
    """Controller class that supplies the page fetcher for a given storage kind.

        hdfs -> HDFSFetcher
        s3   -> S3Fetcher
        adls -> ADLSFetcher
        abfs -> ABFSFetcher
        ofs  -> OFSFetcher
    """

    def __init__(self):
        self.fetcher_classes: dict[StorageKind, type] = {
            StorageKind.HDFS: HDFSFetcher,
            StorageKind.S3: S3Fetcher,
            StorageKind.ADLS: ADLSFetcher,
            StorageKind.ABFS: ABFSFetcher,
            StorageKind.OFS: OFSFetcher,
        }
        self._fetchers: dict[StorageKind, BasePageFetcher] = {}

    def get_fetcher(self, kind: StorageKind) -> BasePageFetcher:
        """Get (and build if needed) the fetcher for the given kind."""
        if kind not in self._fetchers:
            self._fetchers[kind] = self.fetcher_classes[kind]()
        return self._fetchers[kind]

    def register_fetcher(self, kind: StorageKind, fetcher: BasePageFetcher):
        """Replace the fetcher used for a kind."""
        self._fetchers[kind] = fetcher

    def reset_fetcher(self, kind: StorageKind):
        """Drop the fetcher for a kind so the next lookup builds it from configuration again."""
        self._fetchers.pop(kind, None)
