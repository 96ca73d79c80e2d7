from __future__ import annotations
"""Signed, short-lived links for viewing or downloading an object."""
import logging

from .models import AccessGrant
from .services import S3StorageService
from .validation import AccessRequest

LOGGER = logging.getLogger(__name__)

SIGNED_URL_TTL = 300
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class AccessBroker:
    """Builds :class:`AccessGrant` objects for existing keys."""

    def __init__(self, storage: S3StorageService):
        self._storage = storage

    def get_access(self, request: AccessRequest) -> AccessGrant:
        """Fetch metadata for ``request.key`` and sign a GET link for it.

        The link overrides the response content type and disposition so
        the browser displays or saves the object as requested.

        Raises:
            ObjectNotFoundError: when the key does not exist.
            StorageError: for transport or authorization failures.
        """

        metadata = self._storage.head_object(request.key)
        signed_url = self._storage.presign_get(
            request.key,
            expires_in=SIGNED_URL_TTL,
            content_type=metadata.content_type,
            content_disposition=request.disposition,
        )
        LOGGER.debug("Signed %s link for '%s'", request.disposition, request.key)
        return AccessGrant(
            key=request.key,
            signed_url=signed_url,
            content_type=metadata.content_type or DEFAULT_CONTENT_TYPE,
            content_length=metadata.content_length or 0,
            last_modified=metadata.last_modified,
            disposition=request.disposition,
            expires_in=SIGNED_URL_TTL,
        )
