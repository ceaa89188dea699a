#!/usr/bin/env python3

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from contentvault.clipboard import HTML, PLAIN_TEXT, URI_LIST, CaptureEvent, CapturedFile
from contentvault.models import ContentItem, ContentType
from contentvault.services import ClipboardService, ContentVault, VaultConfig, open_vault
from contentvault.services.ingestion import IngestResult

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 60


def _preview(item: ContentItem) -> str:
    if item.type is ContentType.IMAGE:
        return f"<image, {len(item.content)} chars>"
    text = " ".join(item.content.split())
    if len(text) > PREVIEW_LENGTH:
        text = text[:PREVIEW_LENGTH - 1] + "…"
    return text


def print_items(items: List[ContentItem]) -> None:
    if not items:
        print("No items.")
        return
    for item in items:
        created = item.created_at.astimezone().strftime("%Y-%m-%d %H:%M")
        print(f"{item.id}  {item.type.value:<7}  {created}  {_preview(item)}")


class VaultApp:

    def __init__(self, vault: ContentVault, poll_interval: float = 0.25) -> None:
        self.vault = vault
        self.poll_interval = poll_interval
        self.clipboard_service: Optional[ClipboardService] = None
        self._stopped: Optional[asyncio.Event] = None

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        self._stopped = asyncio.Event()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._stopped.set)
            except (NotImplementedError, RuntimeError):
                pass

        self.clipboard_service = ClipboardService(poll_interval=self.poll_interval)
        async with self.clipboard_service:
            with self.vault.attached(self.clipboard_service):
                print("contentvault watching the clipboard. Press Ctrl+C to stop")
                await self._stopped.wait()

        print("contentvault stopped")


def build_event(args: argparse.Namespace) -> CaptureEvent:
    if args.image:
        return CaptureEvent(files=(CapturedFile.from_path(Path(args.image)),))
    if args.html:
        return CaptureEvent(representations={HTML: args.content})
    if args.link:
        return CaptureEvent(representations={URI_LIST: args.content})
    return CaptureEvent(representations={PLAIN_TEXT: args.content})


def cmd_watch(vault: ContentVault, config: VaultConfig, args: argparse.Namespace) -> int:
    app = VaultApp(vault, poll_interval=args.poll_interval or config.poll_interval)
    try:
        asyncio.run(app.run())
    except NotImplementedError as e:
        logger.error(f"Cannot watch the clipboard: {e}")
        return 1
    return 0


def cmd_list(vault: ContentVault, config: VaultConfig, args: argparse.Namespace) -> int:
    print_items(vault.all_items if args.all else vault.items)
    return 0


def cmd_add(vault: ContentVault, config: VaultConfig, args: argparse.Namespace) -> int:
    if not args.image and args.content is None:
        print("Nothing to add: pass CONTENT or --image PATH")
        return 2

    async def ingest() -> IngestResult:
        return await vault.add_from_capture(build_event(args))

    result = asyncio.run(ingest())
    if result.added and result.item is not None:
        print(result.item.id)
        return 0
    if result.error:
        print(f"Capture failed: {result.error}")
        return 1
    print("Nothing to add.")
    return 0


def cmd_search(vault: ContentVault, config: VaultConfig, args: argparse.Namespace) -> int:
    vault.set_query(args.query)
    print_items(vault.items)
    return 0


def cmd_remove(vault: ContentVault, config: VaultConfig, args: argparse.Namespace) -> int:
    if vault.remove(args.item_id):
        print(f"Removed {args.item_id}")
        return 0
    print(f"No item {args.item_id}")
    return 1


def cmd_clear(vault: ContentVault, config: VaultConfig, args: argparse.Namespace) -> int:
    if not args.yes:
        answer = input("Are you sure you want to clear all items? [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            print("Aborted.")
            return 1
    vault.clear_all()
    print("Cleared.")
    return 0


def cmd_serve(vault: ContentVault, config: VaultConfig, args: argparse.Namespace) -> int:
    import uvicorn

    from contentvault.api import create_app

    uvicorn.run(create_app(vault), host=args.host or config.api_host,
                port=args.port or config.api_port)
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="contentvault - a searchable collection of clipboard captures"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file (default: search upwards from the working directory)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    watch = subparsers.add_parser("watch", help="Capture clipboard changes into the vault")
    watch.add_argument(
        "-i", "--poll-interval",
        type=float,
        default=None,
        help="Clipboard polling interval in seconds (default: 0.25)"
    )
    watch.set_defaults(handler=cmd_watch)

    list_parser = subparsers.add_parser("list", help="List items matching the current query")
    list_parser.add_argument("-a", "--all", action="store_true", help="Ignore the query")
    list_parser.set_defaults(handler=cmd_list)

    add = subparsers.add_parser("add", help="Add content as if it had been pasted")
    add.add_argument("content", nargs="?", default=None)
    kind = add.add_mutually_exclusive_group()
    kind.add_argument("--html", action="store_true", help="Treat CONTENT as HTML")
    kind.add_argument("--link", action="store_true", help="Treat CONTENT as a URI list")
    kind.add_argument("--image", type=str, default=None, help="PNG or JPEG file to add")
    add.set_defaults(handler=cmd_add)

    search = subparsers.add_parser("search", help="Set the search query and list matches")
    search.add_argument("query", nargs="?", default="")
    search.set_defaults(handler=cmd_search)

    remove = subparsers.add_parser("remove", help="Remove an item by id")
    remove.add_argument("item_id")
    remove.set_defaults(handler=cmd_remove)

    clear = subparsers.add_parser("clear", help="Remove every item and reset the query")
    clear.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    clear.set_defaults(handler=cmd_clear)

    serve = subparsers.add_parser("serve", help="Serve the HTTP API")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("-p", "--port", type=int, default=None)
    serve.set_defaults(handler=cmd_serve)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s: %(message)s')

    try:
        config = VaultConfig.from_env(env_path=args.env_file)
        vault = open_vault(config)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1

    try:
        return args.handler(vault, config, args)
    finally:
        vault.store.close()


if __name__ == "__main__":
    sys.exit(main())
