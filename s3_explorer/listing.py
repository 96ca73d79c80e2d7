from __future__ import annotations
"""Listing and pagination of the folders and files under a prefix."""
import logging
import math
from typing import Iterable, Sequence, TypeVar

from .models import (
    CursorListing,
    FolderEntry,
    ListingPagination,
    ListingResult,
    ObjectEntry,
    PageInfo,
)
from .services import S3StorageService
from .validation import BrowseRequest, ListingRequest

LOGGER = logging.getLogger(__name__)

DELIMITER = "/"
# Upper bound on entries considered for a single paginated listing.
LIST_SAFETY_CAP = 1000

T = TypeVar("T")


def normalize_prefix(prefix: str | None) -> str:
    """Strip leading slashes and guarantee a single trailing slash.

    An empty prefix designates the bucket root.
    """

    if not prefix:
        return ""
    trimmed = prefix.lstrip("/")
    if not trimmed:
        return ""
    return trimmed if trimmed.endswith("/") else f"{trimmed}/"


def _recency_key(entry: ObjectEntry) -> tuple[bool, float]:
    if entry.last_modified is None:
        return (True, 0.0)
    return (False, -entry.last_modified.timestamp())


def sort_objects(objects: Iterable[ObjectEntry]) -> list[ObjectEntry]:
    """Newest first; entries without a timestamp go last in fetch order."""

    return sorted(objects, key=_recency_key)


def build_folders(common_prefixes: Iterable[str], prefix: str) -> list[FolderEntry]:
    folders: list[FolderEntry] = []
    for common in common_prefixes:
        relative = common[len(prefix):] if common.startswith(prefix) else common
        if not relative or relative == prefix:
            continue
        name = relative[:-1] if relative.endswith(DELIMITER) else relative
        if not name:
            continue
        folders.append(FolderEntry(name=name, prefix=f"{prefix}{name}{DELIMITER}"))
    return folders


def paginate(items: Sequence[T], page: int, items_per_page: int) -> tuple[list[T], PageInfo]:
    """Slice one page out of ``items``; pages past the end are empty."""

    total_items = len(items)
    total_pages = math.ceil(total_items / items_per_page)
    start = (page - 1) * items_per_page
    return list(items[start:start + items_per_page]), PageInfo(
        current_page=page,
        total_pages=total_pages,
        total_items=total_items,
        items_per_page=items_per_page,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


class ListingService:
    """Fetches immediate children of a prefix and pages through them."""

    def __init__(self, storage: S3StorageService):
        self._storage = storage

    def list_page(self, request: ListingRequest) -> ListingResult:
        """Return one page of folders and one page of files under a prefix.

        Folders and files are paginated independently with the same page
        size. Only the entries returned by a single capped list call are
        paginated; ``is_truncated`` reports whether the store held more.

        Raises:
            StorageError: when the listing cannot be fetched.
        """

        prefix = normalize_prefix(request.prefix)
        children = self._storage.list_children(
            prefix,
            delimiter=DELIMITER,
            max_keys=LIST_SAFETY_CAP,
        )

        all_objects = sort_objects(children.objects)
        all_folders = sorted(build_folders(children.common_prefixes, prefix), key=lambda f: f.name)

        folders, folders_page = paginate(all_folders, request.folders_page, request.items_per_page)
        objects, files_page = paginate(all_objects, request.files_page, request.items_per_page)
        if children.is_truncated:
            LOGGER.debug("Listing of '%s' truncated at %d entries", prefix, LIST_SAFETY_CAP)

        return ListingResult(
            prefix=prefix,
            objects=objects,
            folders=folders,
            pagination=ListingPagination(folders=folders_page, files=files_page),
            is_truncated=children.is_truncated,
            next_cursor=children.next_token or None,
        )

    def browse(self, request: BrowseRequest) -> CursorListing:
        """Return one store-side page, continued through ``next_cursor``."""

        prefix = normalize_prefix(request.prefix)
        children = self._storage.list_children(
            prefix,
            delimiter=DELIMITER,
            max_keys=request.limit,
            continuation_token=request.cursor,
        )
        return CursorListing(
            prefix=prefix,
            objects=sort_objects(children.objects)[:request.limit],
            folders=build_folders(children.common_prefixes, prefix),
            is_truncated=children.is_truncated,
            next_cursor=children.next_token or None,
        )
