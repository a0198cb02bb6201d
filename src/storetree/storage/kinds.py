"""Storage kinds and the canonicalisation of scheme tokens."""
import enum
import re
import typing as t


class StorageKind(enum.Enum):
    """Canonical identifiers of the supported storage backends."""

    HDFS = "hdfs"
    S3 = "s3"
    ADLS = "adls"
    ABFS = "abfs"
    OFS = "ofs"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    StorageKind.HDFS: "Hdfs",
    StorageKind.S3: "S3",
    StorageKind.ADLS: "Adls",
    StorageKind.ABFS: "Abfs",
    StorageKind.OFS: "Ofs",
}

# Applied in order, each one replacing from the match to the end of the token
_ALIASES = [
    (re.compile(r"s3.*", re.IGNORECASE), "s3"),
    (re.compile(r"adl.*", re.IGNORECASE), "adls"),
    (re.compile(r"abfs.*", re.IGNORECASE), "abfs"),
    (re.compile(r"ofs.*", re.IGNORECASE), "ofs"),
]


def canonical_token(token: str) -> str:
    """Apply the alias rules to a raw scheme token (e.g. s3a -> s3, adl -> adls)."""
    token = token.strip().lower()
    for pattern, replacement in _ALIASES:
        token = pattern.sub(replacement, token, count=1)
    return token


def canonical_kind(token: t.Union[str, StorageKind, None]) -> t.Optional[StorageKind]:
    """Find the storage kind for a scheme token, or None if it names no known kind.

        A missing token maps to HDFS.
    """
    if isinstance(token, StorageKind):
        return token
    if token is None or token.strip() == "":
        return StorageKind.HDFS
    try:
        return StorageKind(canonical_token(token))
    except ValueError:
        return None
