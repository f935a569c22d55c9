"""
Content URI resolution for the pets authority.

A fixed pattern table maps (authority, path pattern) pairs to an address
shape. Resolving a URI yields either a CollectionAddress, naming every pet,
or an ItemAddress, naming one pet by its id.
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping
from urllib.parse import urlsplit, urlunsplit

from pet_provider.contract import CONTENT_AUTHORITY, PATH_PETS
from pet_provider.core.errors import UnrecognizedAddress

_DIGITS = re.compile(r"[0-9]+")


class AddressShape(Enum):
    COLLECTION = "collection"
    ITEM = "item"


@dataclass(frozen=True)
class CollectionAddress:
    """Address of the whole pets collection."""

    uri: str

    def overlaps(self, other: "Address") -> bool:
        return True


@dataclass(frozen=True)
class ItemAddress:
    """Address of a single pet, identified by the id embedded in the URI."""

    uri: str
    id: int

    def overlaps(self, other: "Address") -> bool:
        if isinstance(other, ItemAddress):
            return other.id == self.id
        return True


Address = CollectionAddress | ItemAddress


def _segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


class UriMatcher:
    """
    Matches content URIs against an immutable pattern table.

    Patterns are "/"-separated paths where "#" matches one all-digit segment
    and "*" matches any one segment. The scheme, query and fragment of a URI
    are ignored.
    """

    def __init__(self, patterns: Mapping[tuple[str, str], AddressShape]):
        self._patterns = MappingProxyType(
            {(authority, tuple(_segments(path))): shape for (authority, path), shape in patterns.items()}
        )

    @property
    def patterns(self) -> Mapping[tuple[str, tuple[str, ...]], AddressShape]:
        return self._patterns

    def match(self, uri: str) -> AddressShape | None:
        """Return the shape of the first matching pattern, or None."""
        parts = urlsplit(uri)
        segments = _segments(parts.path)

        for (authority, pattern), shape in self._patterns.items():
            if authority != parts.netloc or len(pattern) != len(segments):
                continue
            if all(self._segment_matches(p, s) for p, s in zip(pattern, segments)):
                return shape
        return None

    @staticmethod
    def _segment_matches(pattern: str, segment: str) -> bool:
        if pattern == "#":
            return _DIGITS.fullmatch(segment) is not None
        if pattern == "*":
            return True
        return pattern == segment

    def resolve(self, uri: str, operation: str | None = None) -> Address:
        """
        Resolve a URI to a collection or item address.

        Args:
            uri: Content URI
            operation: Operation name used in the error message

        Raises:
            UnrecognizedAddress: If no pattern matches
        """
        shape = self.match(uri)
        if shape is AddressShape.COLLECTION:
            return CollectionAddress(uri=uri)
        if shape is AddressShape.ITEM:
            return ItemAddress(uri=uri, id=parse_id(uri))
        raise UnrecognizedAddress(uri, operation)


def parse_id(uri: str) -> int:
    """Return the id held in the last path segment of a URI."""
    segments = _segments(urlsplit(uri).path)
    if not segments or _DIGITS.fullmatch(segments[-1]) is None:
        raise UnrecognizedAddress(uri)
    return int(segments[-1])


def with_appended_id(uri: str, row_id: int) -> str:
    """Append a row id to a URI as a new path segment."""
    parts = urlsplit(uri)
    path = parts.path.rstrip("/") + f"/{row_id}"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


PET_URI_MATCHER = UriMatcher(
    {
        (CONTENT_AUTHORITY, PATH_PETS): AddressShape.COLLECTION,
        (CONTENT_AUTHORITY, f"{PATH_PETS}/#"): AddressShape.ITEM,
    }
)
