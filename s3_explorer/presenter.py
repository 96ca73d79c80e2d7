from __future__ import annotations
"""View-agnostic presenter that wraps controller operations."""
from dataclasses import dataclass, replace
import logging
import threading
from typing import Callable, Optional

from .controller import ExplorerController
from .models import AccessGrant, ListingResult
from .services import StorageError
from .settings import AppSettings, SettingsStorage
from .ui_utils import PackageInfo, extract_name, load_package_info
from .validation import DISPOSITIONS, MAX_ITEMS_PER_PAGE, ValidationError


DispatchFn = Callable[[Callable[[], None]], None]
SpawnFn = Callable[[Callable[[], None]], None]
ErrorFn = Callable[[str], None]
DoneFn = Callable[[], None]
NoticeFn = Callable[[str], None]
AccessStateFn = Callable[["AccessState"], None]

LOGGER = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
SUCCESS = "success"
ERROR = "error"

DOWNLOAD_FAILED_NOTICE = "Unable to create a secure download link."
COPY_FAILED_NOTICE = "Unable to copy to the clipboard."


def _format_error(exc: Exception) -> str:
    return str(exc)


def _start_thread(task: Callable[[], None]) -> None:
    threading.Thread(target=task, daemon=True).start()


@dataclass(frozen=True)
class AccessState:
    """Client-observed state of the currently selected object."""

    status: str = IDLE
    key: Optional[str] = None
    grant: Optional[AccessGrant] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class ListingLocation:
    prefix: Optional[str] = None
    folders_page: int = 1
    files_page: int = 1


class ExplorerPresenter:
    """Runs background operations and returns results via callbacks.

    Every selection and every listing request is tagged with a generation
    number. A result is applied only if its generation is still the
    latest one issued, so a slow response for an abandoned key or prefix
    never overwrites a newer one. Callbacks run while publication is
    serialized and must not wait on another thread that publishes.
    """

    def __init__(
        self,
        *,
        controller: ExplorerController | None = None,
        settings_storage: SettingsStorage | None = None,
        dispatch: DispatchFn | None = None,
        spawn: SpawnFn | None = None,
        on_access_change: AccessStateFn | None = None,
        on_notice: NoticeFn | None = None,
        auto_select: bool = True,
    ) -> None:
        self._controller = controller or ExplorerController()
        self._settings_storage = settings_storage or SettingsStorage()
        self._settings = self._settings_storage.load()
        self._dispatch = dispatch or (lambda func: func())
        self._spawn = spawn or _start_thread
        self._on_access_change = on_access_change
        self._on_notice = on_notice
        self._auto_select = auto_select
        self._package_info = load_package_info()
        self._lock = threading.Lock()
        # Held while a result is checked against its generation and published,
        # so a newer publication always reaches observers after an older one.
        self._publish_lock = threading.RLock()
        self._access_generation = 0
        self._access_state = AccessState()
        self._listing_generation = 0
        self._listing: ListingResult | None = None
        self._location = ListingLocation()

    @property
    def settings(self) -> AppSettings:
        return replace(self._settings)

    @property
    def package_info(self) -> PackageInfo:
        return self._package_info

    @property
    def bucket(self) -> str:
        return self._controller.bucket

    @property
    def access_state(self) -> AccessState:
        return self._access_state

    @property
    def listing(self) -> ListingResult | None:
        return self._listing

    @property
    def location(self) -> ListingLocation:
        return self._location

    def save_settings(self, settings: AppSettings) -> None:
        self._settings = settings
        self._settings_storage.save(settings)

    def update_items_per_page(self, value: int) -> None:
        normalized = min(max(int(value), 1), MAX_ITEMS_PER_PAGE)
        self._settings = replace(self._settings, items_per_page=normalized)
        self._settings_storage.save(self._settings)

    def update_default_disposition(self, disposition: str) -> None:
        if disposition not in DISPOSITIONS:
            raise ValueError("disposition must be either 'inline' or 'attachment'")
        self._settings = replace(self._settings, default_disposition=disposition)
        self._settings_storage.save(self._settings)

    # Listing navigation

    def load_listing(
        self,
        *,
        prefix: str | None = None,
        folders_page: int = 1,
        files_page: int = 1,
        on_success: Callable[[ListingResult], None],
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        location = ListingLocation(prefix=prefix, folders_page=folders_page, files_page=files_page)
        items_per_page = self._settings.items_per_page
        with self._lock:
            self._listing_generation += 1
            generation = self._listing_generation
        LOGGER.debug("Loading listing for '%s' (generation %d)", prefix or "", generation)

        def apply(result: ListingResult) -> None:
            with self._publish_lock:
                with self._lock:
                    if generation != self._listing_generation:
                        LOGGER.debug("Discarding stale listing for '%s'", prefix or "")
                        return
                    self._listing = result
                    self._location = location
                on_success(result)
                if self._auto_select:
                    self._sync_selection(result)

        def fail(message: str) -> None:
            with self._publish_lock:
                with self._lock:
                    if generation != self._listing_generation:
                        return
                on_error(message)

        def task() -> None:
            try:
                result = self._controller.list_objects(
                    prefix=prefix,
                    folders_page=folders_page,
                    files_page=files_page,
                    items_per_page=items_per_page,
                )
            except (ValidationError, StorageError) as exc:
                LOGGER.exception("Listing error for prefix '%s'", prefix or "")
                message = _format_error(exc)
                self._dispatch(lambda: fail(message))
            except Exception as exc:
                LOGGER.exception("Unexpected listing error for prefix '%s'", prefix or "")
                message = _format_error(exc)
                self._dispatch(lambda: fail(message))
            else:
                LOGGER.debug(
                    "Listed %d folder(s) and %d file(s) under '%s'",
                    result.pagination.folders.total_items,
                    result.pagination.files.total_items,
                    result.prefix,
                )
                self._dispatch(lambda: apply(result))
            finally:
                if on_done:
                    self._dispatch(on_done)

        self._spawn(task)

    def open_folder(self, prefix: str | None, **callbacks) -> None:
        self.load_listing(prefix=prefix or None, folders_page=1, files_page=1, **callbacks)

    def open_breadcrumb(self, prefix: str | None, **callbacks) -> None:
        self.open_folder(prefix, **callbacks)

    def change_folders_page(self, page: int, **callbacks) -> None:
        current = self._location
        self.load_listing(
            prefix=current.prefix,
            folders_page=page,
            files_page=current.files_page,
            **callbacks,
        )

    def change_files_page(self, page: int, **callbacks) -> None:
        current = self._location
        self.load_listing(
            prefix=current.prefix,
            folders_page=current.folders_page,
            files_page=page,
            **callbacks,
        )

    def refresh(self, **callbacks) -> None:
        current = self._location
        self.load_listing(
            prefix=current.prefix,
            folders_page=current.folders_page,
            files_page=current.files_page,
            **callbacks,
        )

    # Selection

    def select_object(self, key: str | None, *, disposition: str | None = None) -> None:
        if not key:
            self.clear_selection()
            return
        disposition = disposition or self._settings.default_disposition
        with self._lock:
            self._access_generation += 1
            generation = self._access_generation
        self._apply_access(generation, AccessState(status=LOADING, key=key))

        def task() -> None:
            try:
                grant = self._controller.get_object_access(key=key, disposition=disposition)
            except (ValidationError, StorageError) as exc:
                LOGGER.exception("Access error for '%s'", key)
                state = AccessState(status=ERROR, key=key, message=_format_error(exc))
            except Exception as exc:
                LOGGER.exception("Unexpected access error for '%s'", key)
                state = AccessState(status=ERROR, key=key, message=_format_error(exc))
            else:
                state = AccessState(status=SUCCESS, key=key, grant=grant)
            self._dispatch(lambda: self._apply_access(generation, state))

        self._spawn(task)

    def clear_selection(self) -> None:
        with self._lock:
            self._access_generation += 1
            generation = self._access_generation
        self._apply_access(generation, AccessState())

    def _apply_access(self, generation: int, state: AccessState) -> None:
        with self._publish_lock:
            with self._lock:
                if generation != self._access_generation:
                    LOGGER.debug("Discarding stale access result for '%s'", state.key)
                    return
                self._access_state = state
            if self._on_access_change:
                self._on_access_change(state)

    def _sync_selection(self, result: ListingResult) -> None:
        keys = [entry.key for entry in result.objects]
        with self._lock:
            selected = self._access_state.key
        if selected in keys:
            return
        if keys:
            self.select_object(keys[0])
        else:
            self.clear_selection()

    # Presentation actions

    def download(
        self,
        key: str,
        trigger: Callable[[str, str], None],
        *,
        on_done: DoneFn | None = None,
    ) -> None:
        """Request an attachment link for ``key`` and hand it to ``trigger``.

        ``trigger`` receives the signed URL and a suggested file name.
        Failures are logged and reported as a notice, never raised.
        """

        def deliver(grant: AccessGrant) -> None:
            try:
                trigger(grant.signed_url, extract_name(key))
            except Exception:
                LOGGER.exception("Download trigger failed for '%s'", key)
                self._notify(DOWNLOAD_FAILED_NOTICE)

        def task() -> None:
            try:
                grant = self._controller.get_object_access(key=key, disposition="attachment")
            except Exception:
                LOGGER.exception("Download link error for '%s'", key)
                self._dispatch(lambda: self._notify(DOWNLOAD_FAILED_NOTICE))
            else:
                self._dispatch(lambda: deliver(grant))
            finally:
                if on_done:
                    self._dispatch(on_done)

        self._spawn(task)

    def copy_text(self, value: str | None, copy: Callable[[str], None]) -> bool:
        if not value:
            return False
        try:
            copy(value)
        except Exception:
            LOGGER.exception("Clipboard copy failed")
            self._notify(COPY_FAILED_NOTICE)
            return False
        return True

    def _notify(self, message: str) -> None:
        if self._on_notice:
            self._on_notice(message)
