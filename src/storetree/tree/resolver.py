"""Turns a user supplied path, optionally prefixed with a scheme, into a storage kind and path segments."""
import re
import typing as t

import zrlog
from autoinject import injector

from storetree.storage import ConnectorRegistry, StorageKind, canonical_kind
from storetree.util import StoreTreeError, split_path


SCHEME_PATTERN = re.compile(r"^([^:]+):/(/.*)/?", re.IGNORECASE)

# ABFS/ADLS paths can carry "account@container.domain" in the host part; S3 bucket
# names may contain periods, so this is only applied to the Azure kinds.
AZURE_PATTERN = re.compile(r"^([^:]+):/(/((\w+)@)?\w+([\-.]\w+)*\.\w*)?(/.*)?/?", re.IGNORECASE)


class UnresolvedConnector(StoreTreeError):
    """No connector is available for the requested storage kind."""

    def __init__(self, token: str):
        super().__init__(f"No connector available for storage type [{token}]", "RESOLVE", 1000)
        self.token = token


class ResolvedPath:
    """Result of resolving a path: the canonical kind, the connector root and the segments to walk."""

    def __init__(self, kind: StorageKind, root_path: str, original_scheme: t.Optional[str], segments: list[str]):
        self.kind = kind
        self.root_path = root_path
        self.original_scheme = original_scheme
        self.segments = segments

    def __repr__(self):
        return f"ResolvedPath({self.kind.value}, root={self.root_path!r}, scheme={self.original_scheme!r}, segments={self.segments!r})"

    def __eq__(self, other):
        if not isinstance(other, ResolvedPath):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.root_path == other.root_path
            and self.original_scheme == other.original_scheme
            and self.segments == other.segments
        )


@injector.injectable
class PathResolver:

    connectors: ConnectorRegistry = None

    @injector.construct
    def __init__(self):
        self._log = zrlog.get_logger("storetree.resolver")

    def resolve(self, path: str, hint_kind: t.Union[StorageKind, str, None] = None) -> ResolvedPath:
        """Resolve a path such as '/tmp/x', 's3a://bucket/a' or 'abfs://acct@cont.dfs.core.windows.net/f'.

            The scheme in the path wins over hint_kind; with neither, HDFS is assumed.
            Raises UnresolvedConnector if there is no connector for the resulting kind.
        """
        scheme_match = SCHEME_PATTERN.match(path)
        original_scheme = scheme_match.group(1) if scheme_match else None
        token = original_scheme if scheme_match else hint_kind
        kind = canonical_kind(token)
        if kind is None:
            self._log.warning(f"Unknown storage type [{token}] for path [{path}]")
            raise UnresolvedConnector(str(token))
        root_path = self.connectors.root_path_for(kind)
        if root_path is None:
            self._log.warning(f"No connector for storage type [{kind.value}]")
            raise UnresolvedConnector(kind.value)
        if kind in (StorageKind.ABFS, StorageKind.ADLS):
            segments = self._azure_segments(path)
        else:
            segments = split_path(scheme_match.group(2) if scheme_match else path)
        resolved = ResolvedPath(kind, root_path, original_scheme, segments)
        self._log.debug(f"Resolved [{path}] to {resolved}")
        return resolved

    @staticmethod
    def _azure_segments(path: str) -> list[str]:
        azure_match = AZURE_PATTERN.match(path)
        if azure_match is None:
            return split_path(path)
        segments = split_path(azure_match.group(6) or '')
        if azure_match.group(4):
            segments.insert(0, azure_match.group(4))
        return segments
