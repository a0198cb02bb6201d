import typing as t

from .exceptions import StoreTreeError, ConfigError


def trim_slashes(path: str) -> str:
    """Remove one leading and one trailing slash, if present."""
    if path.startswith('/'):
        path = path[1:]
    if path.endswith('/'):
        path = path[:-1]
    return path


def split_path(path: t.Optional[str]) -> list[str]:
    """Split a slash-separated path into its non-empty components."""
    if not path:
        return []
    return [x for x in trim_slashes(path).split('/') if x]


def join_path(parent_path: str, name: str) -> str:
    """Append a name to a parent path, adding a separator only when needed."""
    if parent_path != '/' and not parent_path.endswith('/'):
        parent_path += '/'
    return parent_path + name
