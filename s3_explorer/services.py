from __future__ import annotations
"""Storage operations against an S3-compatible bucket."""
import logging
import threading
from typing import Callable, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from .models import ChildrenListing, ObjectEntry, ObjectMetadata
from .profiles import StorageProfile

LOGGER = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class StorageError(RuntimeError):
    """Raised when the storage service cannot complete a request."""

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code


class ObjectNotFoundError(StorageError):
    """Raised when the requested key does not reference an existing object."""


def _translate_error(exc: Exception, *, key: str | None = None) -> StorageError:
    if isinstance(exc, ClientError):
        code = str(exc.response.get("Error", {}).get("Code", "")) or None
        if key is not None and code in NOT_FOUND_CODES:
            return ObjectNotFoundError(f"Object '{key}' does not exist", code=code)
        return StorageError(str(exc), code=code)
    return StorageError(str(exc))


def _to_object_entry(raw: dict) -> ObjectEntry | None:
    key = raw.get("Key")
    if not key:
        return None
    return ObjectEntry(
        key=key,
        size=raw.get("Size") or 0,
        last_modified=raw.get("LastModified"),
        etag=raw.get("ETag"),
    )


class S3StorageService:
    """Thin wrapper around the three bucket operations the explorer needs."""

    def __init__(
        self,
        profile: StorageProfile,
        client_factory: Callable[..., object] | None = None,
    ):
        self._profile = profile
        self._client_factory = client_factory or boto3.client
        self._client = None
        self._client_lock = threading.Lock()

    @property
    def bucket(self) -> str:
        return self._profile.bucket

    def list_children(
        self,
        prefix: str = "",
        *,
        delimiter: str = "/",
        max_keys: int = 1000,
        continuation_token: Optional[str] = None,
    ) -> ChildrenListing:
        """List the immediate children of ``prefix``.

        Raises:
            StorageError: when the store is unreachable or denies access.
        """

        params: dict[str, object] = {
            "Bucket": self.bucket,
            "Delimiter": delimiter,
            "MaxKeys": max_keys,
        }
        if prefix:
            params["Prefix"] = prefix
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        LOGGER.debug("Listing '%s' in bucket '%s' (max %d)", prefix, self.bucket, max_keys)
        try:
            response = self._get_client().list_objects_v2(**params)
        except (ClientError, BotoCoreError) as exc:
            raise _translate_error(exc) from exc

        objects = [
            entry
            for entry in (_to_object_entry(raw) for raw in response.get("Contents") or [])
            if entry is not None
        ]
        common_prefixes = [
            common["Prefix"]
            for common in response.get("CommonPrefixes") or []
            if common.get("Prefix")
        ]
        LOGGER.debug(
            "Listed %d object(s) and %d prefix(es) under '%s'",
            len(objects),
            len(common_prefixes),
            prefix,
        )
        return ChildrenListing(
            objects=objects,
            common_prefixes=common_prefixes,
            is_truncated=bool(response.get("IsTruncated")),
            next_token=response.get("NextContinuationToken"),
        )

    def head_object(self, key: str) -> ObjectMetadata:
        """Fetch metadata about a single object.

        Raises:
            ObjectNotFoundError: when ``key`` does not exist.
            StorageError: for any other storage failure.
        """

        LOGGER.debug("Fetching metadata for '%s'", key)
        try:
            response = self._get_client().head_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise _translate_error(exc, key=key) from exc
        return ObjectMetadata(
            key=key,
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength"),
            last_modified=response.get("LastModified"),
        )

    def presign_get(
        self,
        key: str,
        *,
        expires_in: int,
        content_type: str | None = None,
        content_disposition: str | None = None,
    ) -> str:
        """Create a presigned GET URL with optional response overrides."""

        if expires_in <= 0:
            raise ValueError("expires_in must be greater than zero")
        params: dict[str, str] = {"Bucket": self.bucket, "Key": key}
        if content_type:
            params["ResponseContentType"] = content_type
        if content_disposition:
            params["ResponseContentDisposition"] = content_disposition
        try:
            return self._get_client().generate_presigned_url(
                "get_object",
                Params=params,
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as exc:
            raise _translate_error(exc) from exc

    def _get_client(self):
        with self._client_lock:
            if self._client is None:
                self._client = self._create_client()
            return self._client

    def _create_client(self):
        config = Config(signature_version="s3v4", s3={"addressing_style": "path"})
        return self._client_factory(
            "s3",
            endpoint_url=self._profile.endpoint_url,
            region_name=self._profile.region,
            aws_access_key_id=self._profile.access_key,
            aws_secret_access_key=self._profile.secret_key,
            config=config,
        )
