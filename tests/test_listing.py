import math
import unittest
from datetime import datetime, timezone

from fakes import FakeStorageService
from s3_explorer.listing import (
    LIST_SAFETY_CAP,
    ListingService,
    build_folders,
    normalize_prefix,
    paginate,
    sort_objects,
)
from s3_explorer.models import ChildrenListing, ObjectEntry
from s3_explorer.services import StorageError
from s3_explorer.validation import BrowseRequest, ListingRequest


def utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


class NormalizePrefixTests(unittest.TestCase):
    def test_normalizes_prefixes(self):
        self.assertEqual("", normalize_prefix(None))
        self.assertEqual("", normalize_prefix(""))
        self.assertEqual("", normalize_prefix("///"))
        self.assertEqual("docs/", normalize_prefix("docs"))
        self.assertEqual("docs/", normalize_prefix("/docs/"))
        self.assertEqual("docs/2024/", normalize_prefix("//docs/2024"))


class SortObjectsTests(unittest.TestCase):
    def test_newest_first_and_undated_last_in_fetch_order(self):
        objects = [
            ObjectEntry(key="undated-1"),
            ObjectEntry(key="old", last_modified=utc(2023, 5, 1)),
            ObjectEntry(key="undated-2"),
            ObjectEntry(key="new", last_modified=utc(2024, 6, 1)),
        ]

        ordered = [entry.key for entry in sort_objects(objects)]

        self.assertEqual(["new", "old", "undated-1", "undated-2"], ordered)


class BuildFoldersTests(unittest.TestCase):
    def test_strips_prefix_and_trailing_slash(self):
        folders = build_folders(["docs/b/", "docs/a/"], "docs/")

        self.assertEqual(["b", "a"], [folder.name for folder in folders])
        self.assertEqual(["docs/b/", "docs/a/"], [folder.prefix for folder in folders])

    def test_discards_prefix_echo_and_empty_names(self):
        folders = build_folders(["docs/", "docs/docs/", "docs/x/"], "docs/")

        self.assertEqual(["x"], [folder.name for folder in folders])

    def test_root_folders(self):
        folders = build_folders(["photos/"], "")

        self.assertEqual("photos", folders[0].name)
        self.assertEqual("photos/", folders[0].prefix)


class PaginateTests(unittest.TestCase):
    def test_pages_reassemble_the_full_list(self):
        for total in (0, 1, 9, 10, 11, 37):
            items = list(range(total))
            for per_page in (1, 3, 10, 50):
                _, first = paginate(items, 1, per_page)
                self.assertEqual(math.ceil(total / per_page), first.total_pages)
                collected = []
                for page in range(1, first.total_pages + 1):
                    chunk, info = paginate(items, page, per_page)
                    self.assertLessEqual(len(chunk), per_page)
                    self.assertEqual(page < info.total_pages, info.has_next_page)
                    self.assertEqual(page > 1, info.has_prev_page)
                    collected.extend(chunk)
                self.assertEqual(items, collected)

    def test_page_beyond_end_is_empty(self):
        chunk, info = paginate(["a", "b", "c"], 5, 2)

        self.assertEqual([], chunk)
        self.assertEqual(2, info.total_pages)
        self.assertFalse(info.has_next_page)
        self.assertTrue(info.has_prev_page)

    def test_empty_list_has_no_pages(self):
        chunk, info = paginate([], 1, 10)

        self.assertEqual([], chunk)
        self.assertEqual(0, info.total_pages)
        self.assertEqual(0, info.total_items)
        self.assertFalse(info.has_next_page)
        self.assertFalse(info.has_prev_page)


class ListingServiceTests(unittest.TestCase):
    def test_sorts_and_paginates_files(self):
        storage = FakeStorageService(
            ChildrenListing(
                objects=[
                    ObjectEntry(key="docs/a", last_modified=utc(2024, 1, 1)),
                    ObjectEntry(key="docs/b", last_modified=utc(2024, 3, 1)),
                    ObjectEntry(key="docs/c"),
                ]
            )
        )
        service = ListingService(storage)

        first = service.list_page(ListingRequest(prefix="docs/", items_per_page=2))
        second = service.list_page(ListingRequest(prefix="docs/", files_page=2, items_per_page=2))

        self.assertEqual(["docs/b", "docs/a"], [entry.key for entry in first.objects])
        self.assertEqual(["docs/c"], [entry.key for entry in second.objects])
        self.assertEqual(2, first.pagination.files.total_pages)
        self.assertEqual(3, first.pagination.files.total_items)
        self.assertTrue(first.pagination.files.has_next_page)
        self.assertFalse(second.pagination.files.has_next_page)
        self.assertTrue(second.pagination.files.has_prev_page)

    def test_folders_sorted_and_paginated_independently(self):
        storage = FakeStorageService(
            ChildrenListing(
                objects=[ObjectEntry(key="docs/readme.md")],
                common_prefixes=["docs/zeta/", "docs/alpha/", "docs/mid/"],
            )
        )
        service = ListingService(storage)

        result = service.list_page(
            ListingRequest(prefix="docs", folders_page=2, files_page=1, items_per_page=2)
        )

        self.assertEqual("docs/", result.prefix)
        self.assertEqual(["zeta"], [folder.name for folder in result.folders])
        self.assertEqual("docs/zeta/", result.folders[0].prefix)
        self.assertEqual(2, result.pagination.folders.current_page)
        self.assertEqual(2, result.pagination.folders.total_pages)
        self.assertEqual(1, result.pagination.files.current_page)
        self.assertEqual(["docs/readme.md"], [entry.key for entry in result.objects])

    def test_issues_single_capped_delimited_call(self):
        storage = FakeStorageService(ChildrenListing(is_truncated=True, next_token="more"))
        service = ListingService(storage)

        result = service.list_page(ListingRequest(prefix="/docs"))

        self.assertEqual(
            [{"prefix": "docs/", "delimiter": "/", "max_keys": LIST_SAFETY_CAP, "continuation_token": None}],
            storage.list_calls,
        )
        self.assertTrue(result.is_truncated)
        self.assertEqual("more", result.next_cursor)

    def test_empty_continuation_token_becomes_none(self):
        service = ListingService(FakeStorageService(ChildrenListing(next_token="")))

        result = service.list_page(ListingRequest(prefix="docs/"))

        self.assertIsNone(result.next_cursor)

    def test_empty_prefix_listing(self):
        service = ListingService(FakeStorageService(ChildrenListing()))

        result = service.list_page(ListingRequest(prefix="empty/"))

        self.assertEqual([], result.objects)
        self.assertEqual([], result.folders)
        for info in (result.pagination.files, result.pagination.folders):
            self.assertEqual(0, info.total_items)
            self.assertEqual(0, info.total_pages)
            self.assertFalse(info.has_next_page)
            self.assertFalse(info.has_prev_page)

    def test_storage_failure_propagates(self):
        storage = FakeStorageService(error=StorageError("Denied", code="AccessDenied"))
        service = ListingService(storage)

        with self.assertRaises(StorageError):
            service.list_page(ListingRequest(prefix="docs/"))

    def test_as_dict_uses_camel_case(self):
        storage = FakeStorageService(
            ChildrenListing(objects=[ObjectEntry(key="a", size=1, last_modified=utc(2024, 1, 1))])
        )
        payload = ListingService(storage).list_page(ListingRequest()).as_dict()

        self.assertEqual("2024-01-01T00:00:00+00:00", payload["objects"][0]["lastModified"])
        self.assertEqual(1, payload["pagination"]["files"]["totalItems"])
        self.assertEqual(10, payload["pagination"]["folders"]["itemsPerPage"])
        self.assertFalse(payload["isTruncated"])


class BrowseTests(unittest.TestCase):
    def test_browse_passes_cursor_and_limit(self):
        storage = FakeStorageService(
            ChildrenListing(
                objects=[
                    ObjectEntry(key="a", last_modified=utc(2024, 1, 1)),
                    ObjectEntry(key="b", last_modified=utc(2024, 2, 1)),
                ],
                common_prefixes=["z/", "y/"],
                is_truncated=True,
                next_token="next",
            )
        )
        service = ListingService(storage)

        result = service.browse(BrowseRequest(limit=2, cursor="token"))

        self.assertEqual("token", storage.list_calls[0]["continuation_token"])
        self.assertEqual(2, storage.list_calls[0]["max_keys"])
        self.assertEqual(["b", "a"], [entry.key for entry in result.objects])
        self.assertEqual(["z", "y"], [folder.name for folder in result.folders])
        self.assertTrue(result.is_truncated)
        self.assertEqual("next", result.next_cursor)

    def test_browse_without_more_results(self):
        service = ListingService(FakeStorageService(ChildrenListing(next_token="")))

        result = service.browse(BrowseRequest(prefix="docs"))

        self.assertEqual("docs/", result.prefix)
        self.assertIsNone(result.next_cursor)


if __name__ == "__main__":
    unittest.main()
