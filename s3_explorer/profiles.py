from __future__ import annotations
"""Storage connection profile loaded from the environment."""
from dataclasses import dataclass
import os
from typing import Mapping
from urllib.parse import urlparse

import keyring
from keyring.errors import KeyringError

ENDPOINT_VAR = "S3_ENDPOINT"
REGION_VAR = "S3_REGION"
ACCESS_KEY_VAR = "S3_ACCESS_KEY"
SECRET_KEY_VAR = "S3_SECRET_KEY"
BUCKET_VAR = "S3_BUCKET"


class ConfigurationError(RuntimeError):
    """Raised at startup when the storage settings are missing or invalid."""

    def __init__(self, problems: list[str]):
        super().__init__("Invalid storage configuration: " + "; ".join(problems))
        self.problems = list(problems)


@dataclass(frozen=True)
class StorageProfile:
    """Connection settings for the single bucket being browsed."""

    endpoint_url: str
    region: str
    access_key: str
    secret_key: str
    bucket: str

    def __repr__(self) -> str:
        return (
            f"StorageProfile(endpoint_url={self.endpoint_url!r}, region={self.region!r}, "
            f"access_key={self.access_key!r}, secret_key='***', bucket={self.bucket!r})"
        )


class KeychainStore:
    """Encapsulates OS keychain access for secret keys."""

    def __init__(self, service_name: str = "s3-explorer"):
        self._service_name = service_name

    def get_secret(self, access_key: str) -> str:
        if not access_key:
            return ""
        try:
            return keyring.get_password(self._service_name, access_key) or ""
        except KeyringError:
            return ""

    def set_secret(self, access_key: str, secret_key: str) -> None:
        if not access_key:
            return
        if not secret_key:
            self.delete_secret(access_key)
            return
        keyring.set_password(self._service_name, access_key, secret_key)

    def delete_secret(self, access_key: str) -> None:
        if not access_key:
            return
        try:
            keyring.delete_password(self._service_name, access_key)
        except KeyringError:
            return


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def load_profile(
    environ: Mapping[str, str] | None = None,
    keychain: KeychainStore | None = None,
) -> StorageProfile:
    """Build a :class:`StorageProfile` from environment variables.

    The secret key falls back to the OS keychain entry stored under the
    access key when ``S3_SECRET_KEY`` is not set.

    Raises:
        ConfigurationError: listing every missing or invalid variable.
    """

    env = os.environ if environ is None else environ
    values = {
        name: (env.get(name) or "").strip()
        for name in (ENDPOINT_VAR, REGION_VAR, ACCESS_KEY_VAR, SECRET_KEY_VAR, BUCKET_VAR)
    }
    if not values[SECRET_KEY_VAR] and values[ACCESS_KEY_VAR]:
        keychain = keychain or KeychainStore()
        values[SECRET_KEY_VAR] = keychain.get_secret(values[ACCESS_KEY_VAR])

    problems = [f"{name} is required" for name, value in values.items() if not value]
    if values[ENDPOINT_VAR] and not _is_http_url(values[ENDPOINT_VAR]):
        problems.append(f"{ENDPOINT_VAR} must be an http(s) URL")
    if problems:
        raise ConfigurationError(problems)

    return StorageProfile(
        endpoint_url=values[ENDPOINT_VAR],
        region=values[REGION_VAR],
        access_key=values[ACCESS_KEY_VAR],
        secret_key=values[SECRET_KEY_VAR],
        bucket=values[BUCKET_VAR],
    )
