"""Command-line entry point for the S3 explorer."""
import argparse
import getpass
import json
import logging
import sys

from keyring.errors import KeyringError

from .controller import ExplorerController
from .models import AccessGrant, CursorListing, ListingResult, PageInfo
from .profiles import ConfigurationError, KeychainStore
from .services import StorageError
from .ui_utils import (
    build_breadcrumbs,
    build_download_commands,
    extract_name,
    format_last_modified,
    format_size,
    load_package_info,
    page_item_range,
    shorten_key,
    visible_pages,
)
from .validation import ValidationError

LOGGER = logging.getLogger(__name__)

EXIT_STORAGE_ERROR = 1
EXIT_USAGE_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    info = load_package_info()
    parser = argparse.ArgumentParser(prog="s3-explorer", description=info.summary)
    parser.add_argument("--version", action="version", version=f"%(prog)s {info.version}".strip())
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    ls = commands.add_parser("ls", help="list one page of folders and files under a prefix")
    ls.add_argument("prefix", nargs="?", default=None)
    ls.add_argument("--folders-page", type=int, default=1)
    ls.add_argument("--files-page", type=int, default=1)
    ls.add_argument("--per-page", type=int, default=10)
    ls.add_argument("--json", action="store_true")

    browse = commands.add_parser("browse", help="list children using store-side cursors")
    browse.add_argument("prefix", nargs="?", default=None)
    browse.add_argument("--limit", type=int, default=50)
    browse.add_argument("--cursor", default=None)
    browse.add_argument("--json", action="store_true")

    link = commands.add_parser("link", help="create a short-lived signed link to an object")
    link.add_argument("key")
    link.add_argument("--download", action="store_true", help="force the browser to save the file")
    link.add_argument("--commands", action="store_true", help="print wget/curl commands")
    link.add_argument("--json", action="store_true")

    secret = commands.add_parser("store-secret", help="save a secret key in the OS keychain")
    secret.add_argument("access_key")
    return parser


def _page_summary(label: str, info: PageInfo) -> str:
    start, end = page_item_range(info)
    pages = " ".join(
        f"[{page}]" if page == info.current_page else str(page)
        for page in visible_pages(info.current_page, info.total_pages)
    )
    summary = f"{label} {start}-{end} of {info.total_items}"
    return f"{summary}  pages: {pages}" if pages else summary


def _print_listing(result: ListingResult) -> None:
    crumbs = " / ".join(crumb.label for crumb in build_breadcrumbs(result.prefix))
    print(f"/{crumbs}" if crumbs else "/")
    print(_page_summary("Folders", result.pagination.folders))
    for folder in result.folders:
        print(f"  {folder.name}/")
    print(_page_summary("Files", result.pagination.files))
    for entry in result.objects:
        print(
            f"  {shorten_key(extract_name(entry.key)):<28} {format_size(entry.size):>8}  "
            f"{format_last_modified(entry.last_modified)}"
        )
    if result.is_truncated:
        print("(listing truncated; only the first entries are paginated)")


def _print_cursor_listing(result: CursorListing) -> None:
    for folder in result.folders:
        print(f"{folder.prefix}")
    for entry in result.objects:
        print(f"{entry.key}\t{format_size(entry.size)}\t{format_last_modified(entry.last_modified)}")
    if result.next_cursor:
        print(f"next cursor: {result.next_cursor}")


def _print_grant(grant: AccessGrant, *, with_commands: bool) -> None:
    print(grant.signed_url)
    print(
        f"{grant.content_type}, {format_size(grant.content_length)}, "
        f"modified {format_last_modified(grant.last_modified)}, "
        f"valid for {grant.expires_in // 60} minutes"
    )
    if with_commands:
        for command in build_download_commands(grant.signed_url, extract_name(grant.key)):
            print(command)


def _store_secret(access_key: str) -> int:
    secret_key = getpass.getpass("Secret key: ") if sys.stdin.isatty() else sys.stdin.readline().strip()
    try:
        KeychainStore().set_secret(access_key, secret_key)
    except KeyringError as exc:
        print(f"error: unable to store secret: {exc}", file=sys.stderr)
        return EXIT_STORAGE_ERROR
    return 0


def run(args: argparse.Namespace, controller: ExplorerController | None = None) -> int:
    if args.command == "store-secret":
        return _store_secret(args.access_key)

    try:
        controller = controller or ExplorerController()
        if args.command == "ls":
            result = controller.list_objects(
                prefix=args.prefix,
                folders_page=args.folders_page,
                files_page=args.files_page,
                items_per_page=args.per_page,
            )
            if args.json:
                print(json.dumps(result.as_dict(), indent=2))
            else:
                _print_listing(result)
        elif args.command == "browse":
            result = controller.browse_objects(prefix=args.prefix, limit=args.limit, cursor=args.cursor)
            if args.json:
                print(json.dumps(result.as_dict(), indent=2))
            else:
                _print_cursor_listing(result)
        elif args.command == "link":
            grant = controller.get_object_access(
                key=args.key,
                disposition="attachment" if args.download else "inline",
            )
            if args.json:
                print(json.dumps(grant.as_dict(), indent=2))
            else:
                _print_grant(grant, with_commands=args.commands)
    except (ConfigurationError, ValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except StorageError as exc:
        LOGGER.debug("Storage request failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_STORAGE_ERROR
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
