from __future__ import annotations
"""Request shapes accepted by the explorer and their validation rules."""
from dataclasses import dataclass
from typing import Mapping, Optional

DISPOSITIONS = ("inline", "attachment")
DEFAULT_ITEMS_PER_PAGE = 10
MAX_ITEMS_PER_PAGE = 50
DEFAULT_BROWSE_LIMIT = 50
MAX_BROWSE_LIMIT = 200


class ValidationError(ValueError):
    """Raised when request parameters violate a constraint."""

    def __init__(self, field: str, constraint: str):
        super().__init__(f"{field}: {constraint}")
        self.field = field
        self.constraint = constraint


def _require_int(name: str, value: object, *, minimum: int = 1, maximum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(name, "must be an integer")
    if value < minimum:
        raise ValidationError(name, f"must be greater than or equal to {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationError(name, f"must be less than or equal to {maximum}")
    return value


def _coerce_int(name: str, value: object, default: int) -> object:
    """Convert query-string style values to ``int``; leave the rest for validation."""

    if value is None or value == "":
        return default
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValidationError(name, "must be an integer") from None
    return value


def _optional_str(name: str, value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(name, "must be a string")
    return value


@dataclass(frozen=True)
class ListingRequest:
    prefix: Optional[str] = None
    folders_page: int = 1
    files_page: int = 1
    items_per_page: int = DEFAULT_ITEMS_PER_PAGE

    def __post_init__(self) -> None:
        _optional_str("prefix", self.prefix)
        _require_int("foldersPage", self.folders_page)
        _require_int("filesPage", self.files_page)
        _require_int("itemsPerPage", self.items_per_page, maximum=MAX_ITEMS_PER_PAGE)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "ListingRequest":
        return cls(
            prefix=_optional_str("prefix", data.get("prefix")),
            folders_page=_coerce_int("foldersPage", data.get("foldersPage"), 1),
            files_page=_coerce_int("filesPage", data.get("filesPage"), 1),
            items_per_page=_coerce_int(
                "itemsPerPage", data.get("itemsPerPage"), DEFAULT_ITEMS_PER_PAGE
            ),
        )


@dataclass(frozen=True)
class BrowseRequest:
    prefix: Optional[str] = None
    limit: int = DEFAULT_BROWSE_LIMIT
    cursor: Optional[str] = None

    def __post_init__(self) -> None:
        _optional_str("prefix", self.prefix)
        _optional_str("cursor", self.cursor)
        _require_int("limit", self.limit, maximum=MAX_BROWSE_LIMIT)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "BrowseRequest":
        return cls(
            prefix=_optional_str("prefix", data.get("prefix")),
            limit=_coerce_int("limit", data.get("limit"), DEFAULT_BROWSE_LIMIT),
            cursor=_optional_str("cursor", data.get("cursor")) or None,
        )


@dataclass(frozen=True)
class AccessRequest:
    key: str
    disposition: str = "inline"

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise ValidationError("key", "must be a non-empty string")
        if self.disposition not in DISPOSITIONS:
            raise ValidationError("disposition", "must be one of: inline, attachment")

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "AccessRequest":
        disposition = data.get("disposition") or "inline"
        return cls(key=data.get("key"), disposition=disposition)  # type: ignore[arg-type]
