from __future__ import annotations
"""Application settings persistence helpers."""

from dataclasses import asdict, dataclass
import json
from pathlib import Path

from .validation import DEFAULT_ITEMS_PER_PAGE, DISPOSITIONS, MAX_ITEMS_PER_PAGE


@dataclass
class AppSettings:
    """Simple container for persistent viewer preferences."""

    items_per_page: int = DEFAULT_ITEMS_PER_PAGE
    default_disposition: str = "inline"


def _clamp_items_per_page(value: object) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return AppSettings.items_per_page
    if number <= 0:
        return AppSettings.items_per_page
    return min(number, MAX_ITEMS_PER_PAGE)


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_explorer_settings.json"
        self._path = Path(storage_path)

    def load(self) -> AppSettings:
        if not self._path.exists():
            return AppSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()
        disposition = data.get("default_disposition")
        if disposition not in DISPOSITIONS:
            disposition = AppSettings.default_disposition
        return AppSettings(
            items_per_page=_clamp_items_per_page(
                data.get("items_per_page", AppSettings.items_per_page)
            ),
            default_disposition=disposition,
        )

    def save(self, settings: AppSettings) -> None:
        payload = asdict(settings)
        payload["items_per_page"] = max(min(int(settings.items_per_page), MAX_ITEMS_PER_PAGE), 1)
        if payload["default_disposition"] not in DISPOSITIONS:
            payload["default_disposition"] = AppSettings.default_disposition
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            return
