from __future__ import annotations
"""Value objects describing listings and object access."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class ObjectEntry:
    """Snapshot of a single stored object at fetch time."""

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None

    def as_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "size": self.size,
            "lastModified": _isoformat(self.last_modified),
            "etag": self.etag,
        }


@dataclass(frozen=True)
class FolderEntry:
    """A sub-folder one level below the queried prefix."""

    name: str
    prefix: str

    def as_dict(self) -> dict[str, object]:
        return {"name": self.name, "prefix": self.prefix}


@dataclass(frozen=True)
class PageInfo:
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    def as_dict(self) -> dict[str, object]:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalItems": self.total_items,
            "itemsPerPage": self.items_per_page,
            "hasNextPage": self.has_next_page,
            "hasPrevPage": self.has_prev_page,
        }


@dataclass(frozen=True)
class ListingPagination:
    folders: PageInfo
    files: PageInfo


@dataclass
class ChildrenListing:
    """Raw result of one delimited list call against the store."""

    objects: list[ObjectEntry] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)
    is_truncated: bool = False
    next_token: Optional[str] = None


@dataclass
class ListingResult:
    """One page of folders and one page of files under a prefix."""

    prefix: str
    objects: list[ObjectEntry]
    folders: list[FolderEntry]
    pagination: ListingPagination
    is_truncated: bool = False
    next_cursor: Optional[str] = None

    def as_dict(self) -> dict[str, object]:
        return {
            "prefix": self.prefix,
            "objects": [entry.as_dict() for entry in self.objects],
            "folders": [entry.as_dict() for entry in self.folders],
            "pagination": {
                "folders": self.pagination.folders.as_dict(),
                "files": self.pagination.files.as_dict(),
            },
            "isTruncated": self.is_truncated,
            "nextCursor": self.next_cursor,
        }


@dataclass
class CursorListing:
    """A store-paginated listing, continued with ``next_cursor``."""

    prefix: str
    objects: list[ObjectEntry] = field(default_factory=list)
    folders: list[FolderEntry] = field(default_factory=list)
    is_truncated: bool = False
    next_cursor: Optional[str] = None

    def as_dict(self) -> dict[str, object]:
        return {
            "prefix": self.prefix,
            "objects": [entry.as_dict() for entry in self.objects],
            "folders": [entry.as_dict() for entry in self.folders],
            "isTruncated": self.is_truncated,
            "nextCursor": self.next_cursor,
        }


@dataclass(frozen=True)
class ObjectMetadata:
    key: str
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class AccessGrant:
    """A short-lived signed link to a single object."""

    key: str
    signed_url: str
    content_type: str
    content_length: int
    last_modified: Optional[datetime] = None
    disposition: str = "inline"
    expires_in: int = 300

    def as_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "signedUrl": self.signed_url,
            "contentType": self.content_type,
            "contentLength": self.content_length,
            "lastModified": _isoformat(self.last_modified),
        }


@dataclass(frozen=True)
class Breadcrumb:
    label: str
    prefix: str
