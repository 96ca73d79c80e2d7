from __future__ import annotations
"""Controller layer coordinating listing and access requests."""

from typing import Mapping

from .access import AccessBroker
from .listing import ListingService
from .models import AccessGrant, CursorListing, ListingResult
from .profiles import StorageProfile, load_profile
from .services import S3StorageService
from .validation import AccessRequest, BrowseRequest, ListingRequest


class ExplorerController:
    """Validates caller input, then delegates to the storage-backed services.

    Constructing a controller without an explicit service loads the
    storage profile from the environment, so configuration problems
    surface at startup.
    """

    def __init__(
        self,
        service: S3StorageService | None = None,
        profile: StorageProfile | None = None,
    ):
        if service is None:
            service = S3StorageService(profile or load_profile())
        self._service = service
        self._listing = ListingService(service)
        self._broker = AccessBroker(service)

    @property
    def bucket(self) -> str:
        return self._service.bucket

    def list_objects(
        self,
        *,
        prefix: str | None = None,
        folders_page: int = 1,
        files_page: int = 1,
        items_per_page: int = 10,
    ) -> ListingResult:
        request = ListingRequest(
            prefix=prefix,
            folders_page=folders_page,
            files_page=files_page,
            items_per_page=items_per_page,
        )
        return self._listing.list_page(request)

    def browse_objects(
        self,
        *,
        prefix: str | None = None,
        limit: int = 50,
        cursor: str | None = None,
    ) -> CursorListing:
        return self._listing.browse(BrowseRequest(prefix=prefix, limit=limit, cursor=cursor))

    def get_object_access(self, *, key: str, disposition: str = "inline") -> AccessGrant:
        return self._broker.get_access(AccessRequest(key=key, disposition=disposition))

    def handle_listing_query(self, query: Mapping[str, object]) -> ListingResult:
        return self._listing.list_page(ListingRequest.from_mapping(query))

    def handle_browse_query(self, query: Mapping[str, object]) -> CursorListing:
        return self._listing.browse(BrowseRequest.from_mapping(query))

    def handle_access_query(self, query: Mapping[str, object]) -> AccessGrant:
        return self._broker.get_access(AccessRequest.from_mapping(query))
