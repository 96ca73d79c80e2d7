import os
import unittest
from unittest import mock

from fakes import FakeStorageService
from s3_explorer.controller import ExplorerController
from s3_explorer.models import ChildrenListing, ObjectEntry, ObjectMetadata
from s3_explorer.profiles import ConfigurationError
from s3_explorer.validation import ValidationError


class ExplorerControllerTests(unittest.TestCase):
    def setUp(self):
        self.storage = FakeStorageService(
            ChildrenListing(objects=[ObjectEntry(key="docs/a.txt")], common_prefixes=["docs/sub/"]),
            metadata={"docs/a.txt": ObjectMetadata(key="docs/a.txt", content_type="text/plain")},
        )
        self.controller = ExplorerController(service=self.storage)

    def test_list_objects_delegates_to_listing(self):
        result = self.controller.list_objects(prefix="docs", items_per_page=5)

        self.assertEqual("docs/", result.prefix)
        self.assertEqual(["sub"], [folder.name for folder in result.folders])
        self.assertEqual(5, result.pagination.files.items_per_page)
        self.assertEqual(1, len(self.storage.list_calls))

    def test_invalid_listing_rejected_before_storage_call(self):
        for kwargs in ({"folders_page": 0}, {"files_page": -2}, {"items_per_page": 51}):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValidationError):
                    self.controller.list_objects(prefix="docs", **kwargs)
        self.assertEqual([], self.storage.list_calls)

    def test_invalid_access_rejected_before_storage_call(self):
        with self.assertRaises(ValidationError):
            self.controller.get_object_access(key="")
        with self.assertRaises(ValidationError):
            self.controller.get_object_access(key="docs/a.txt", disposition="download")
        self.assertEqual([], self.storage.head_calls)

    def test_get_object_access(self):
        grant = self.controller.get_object_access(key="docs/a.txt", disposition="attachment")

        self.assertEqual("text/plain", grant.content_type)
        self.assertEqual("attachment", self.storage.presign_calls[0]["content_disposition"])

    def test_query_handlers_parse_raw_mappings(self):
        listing = self.controller.handle_listing_query({"prefix": "docs", "filesPage": "2"})
        browse = self.controller.handle_browse_query({"prefix": "docs", "limit": "5"})
        grant = self.controller.handle_access_query({"key": "docs/a.txt"})

        self.assertEqual(2, listing.pagination.files.current_page)
        self.assertEqual([], listing.objects)
        self.assertEqual(5, self.storage.list_calls[1]["max_keys"])
        self.assertEqual("docs/", browse.prefix)
        self.assertEqual("inline", grant.disposition)

    def test_bucket_comes_from_service(self):
        self.assertEqual("bucket-one", self.controller.bucket)

    def test_missing_configuration_fails_at_construction(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigurationError):
                ExplorerController()


if __name__ == "__main__":
    unittest.main()
