"""
    Lazily loaded tree view over the storage backends.

    Typical use is to let get_entry() resolve a path and load the tree down to it:

        entry = await get_entry("s3a://bucket/data/2024")
        entry.hierarchy()  # ['bucket', 'data', '2024'] if it exists

    The result is the deepest entry that exists along the path, so callers should
    compare entry.hierarchy() with what they asked for when they need to know if
    the full path was found.
"""
from .entry import StorageEntry, LoadingState
from .events import EventBus
from .resolver import PathResolver, ResolvedPath, UnresolvedConnector
from .walker import DeepPathWalker, get_entry
