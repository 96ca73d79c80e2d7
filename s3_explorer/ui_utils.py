from __future__ import annotations
"""UI-agnostic helpers for formatting and command generation."""
from dataclasses import dataclass
from datetime import datetime
from importlib.metadata import PackageNotFoundError, metadata, version

from .models import Breadcrumb, PageInfo

DIST_NAME = "s3-explorer"
SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
MISSING_VALUE = "—"
ELLIPSIS = "..."
# Pages shown on each side of the current page in a page window.
PAGE_WINDOW_DELTA = 1


@dataclass(frozen=True)
class PackageInfo:
    name: str
    version: str
    summary: str
    homepage: str | None
    repository: str | None


def load_package_info(dist_name: str = DIST_NAME) -> PackageInfo:
    try:
        distribution_metadata = metadata(dist_name)
        package_version = version(dist_name)
    except PackageNotFoundError:
        return PackageInfo(
            name="S3 Explorer",
            version="",
            summary="Browse an S3-compatible bucket and share signed links.",
            homepage=None,
            repository=None,
        )
    homepage = distribution_metadata.get("Home-page")
    repository = None
    for entry in distribution_metadata.get_all("Project-URL") or []:
        label, _, link = entry.partition(",")
        label = label.strip().lower()
        url = link.strip()
        if label == "repository":
            repository = url
        elif label == "homepage" and not homepage:
            homepage = url
    return PackageInfo(
        name=distribution_metadata.get("Name"),
        version=package_version,
        summary=distribution_metadata.get("Summary") or "",
        homepage=homepage or None,
        repository=repository,
    )


def format_size(size: int | None) -> str:
    if size is None:
        return MISSING_VALUE
    if size <= 0:
        return "0 B"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    if value >= 10 or value % 1 == 0:
        return f"{value:.0f} {SIZE_UNITS[exponent]}"
    return f"{value:.1f} {SIZE_UNITS[exponent]}"


def format_last_modified(last_modified: datetime | None) -> str:
    if not last_modified:
        return MISSING_VALUE
    return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def extract_name(key: str) -> str:
    parts = [part for part in key.split("/") if part]
    return parts[-1] if parts else key


def shorten_key(key: str) -> str:
    if len(key) > 28:
        return f"{key[:12]}....{key[-12:]}"
    return key


def build_breadcrumbs(prefix: str | None) -> list[Breadcrumb]:
    parts = [part for part in (prefix or "").split("/") if part]
    return [
        Breadcrumb(label=part, prefix="/".join(parts[: index + 1]) + "/")
        for index, part in enumerate(parts)
    ]


def page_item_range(info: PageInfo) -> tuple[int, int]:
    """Return the 1-based positions of the first and last item on a page.

    ``(0, 0)`` when the page holds no items.
    """

    start = (info.current_page - 1) * info.items_per_page + 1
    end = min(info.current_page * info.items_per_page, info.total_items)
    if start > end:
        return (0, 0)
    return (start, end)


def visible_pages(current: int, total: int) -> list[int | str]:
    """Page numbers to offer for navigation, with gaps shown as ``...``.

    Up to five pages are all listed. Beyond that the first and last pages
    are always present, with the current page and its neighbours between.
    """

    if total <= 5:
        return list(range(1, total + 1))
    pages: list[int | str] = [1]
    if current > PAGE_WINDOW_DELTA + 2:
        pages.append(ELLIPSIS)
    start = max(2, current - PAGE_WINDOW_DELTA)
    end = min(total - 1, current + PAGE_WINDOW_DELTA)
    pages.extend(range(start, end + 1))
    if current < total - PAGE_WINDOW_DELTA - 1:
        pages.append(ELLIPSIS)
    pages.append(total)
    return pages


def build_download_commands(url: str, filename: str) -> tuple[str, str]:
    wget_cmd = f'wget "{url}" -O "{filename}"'
    curl_cmd = f'curl -L "{url}" -o "{filename}"'
    return wget_cmd, curl_cmd
