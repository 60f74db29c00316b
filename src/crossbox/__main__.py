"""CrossBox command line.

Commands:
  crossbox authorize            Grant Google Drive access (stores tokens)
  crossbox ls [PATH]            List a remote folder
  crossbox upload FILE [--to]   Upload a local file into a remote folder
"""

import argparse
import asyncio
import logging
import sys

import httpx
from rich.console import Console
from rich.table import Table

from crossbox.config import Settings, get_settings
from crossbox.controllers import BrowserController, SelectionState
from crossbox.errors import AuthenticationError
from crossbox.integrations.gdrive import DriveStorageClient
from crossbox.integrations.oauth import OAuthManager
from crossbox.integrations.token_store import TokenStore, oauth_dir
from crossbox.logging_setup import setup_logging
from crossbox.navigation import Navigator, build_navigator
from crossbox.reporting import LoggingErrorReporter
from crossbox.selectors import PathFileSelector

logger = logging.getLogger(__name__)
console = Console()


def _open_browser(navigator: Navigator, path: str) -> BrowserController:
    screen = navigator.dispatch(BrowserController, {"path": path})
    if not isinstance(screen, BrowserController):
        raise TypeError(f"Expected a folder browser for {path}, got {screen!r}")
    return screen


def _render_listing(controller: BrowserController) -> None:
    table = Table(title=controller.current_folder_path, title_justify="left")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Path", style="dim")
    for item in controller.folder_contents:
        table.add_row("dir" if item.is_directory else "file", item.name, item.full_path)
    console.print(table)


async def run_ls(settings: Settings, path: str) -> int:
    reporter = LoggingErrorReporter()
    navigator = build_navigator(
        DriveStorageClient(settings), PathFileSelector(lambda: None), reporter
    )
    screen = _open_browser(navigator, path)
    state = await screen.initial_load
    if state is not SelectionState.UPDATED:
        return 1
    _render_listing(screen)
    return 0


async def run_upload(settings: Settings, local_path: str, remote_folder: str) -> int:
    reporter = LoggingErrorReporter()
    navigator = build_navigator(
        DriveStorageClient(settings), PathFileSelector(lambda: local_path), reporter
    )
    screen = _open_browser(navigator, remote_folder)
    if await screen.initial_load is not SelectionState.UPDATED:
        return 1
    if not await screen.upload_file():
        return 1
    console.print(f"Uploaded [bold]{local_path}[/bold] to {screen.current_folder_path}")
    return 0


async def run_authorize(settings: Settings) -> int:
    if not settings.google_oauth_client_id or not settings.google_oauth_client_secret:
        logger.error(
            "Set CROSSBOX_GOOGLE_OAUTH_CLIENT_ID and CROSSBOX_GOOGLE_OAUTH_CLIENT_SECRET first."
        )
        return 1

    manager = OAuthManager(
        TokenStore(oauth_dir(settings.config_dir)), timeout=settings.http_timeout
    )
    console.print("Open this URL and grant access:\n")
    console.print(manager.get_auth_url(settings.google_oauth_client_id), soft_wrap=True)
    code = console.input("\nAuthorization code: ").strip()
    if not code:
        return 1

    try:
        await manager.exchange_code(
            service=settings.drive_service,
            code=code,
            client_id=settings.google_oauth_client_id,
            client_secret=settings.google_oauth_client_secret,
        )
    except (httpx.HTTPError, AuthenticationError) as e:
        logger.error("Code exchange failed: %s", e)
        return 1
    console.print("Google Drive authorized.")
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(prog="crossbox", description="Remote storage browser")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("authorize", help="Grant Google Drive access")

    ls_parser = sub.add_parser("ls", help="List a remote folder")
    ls_parser.add_argument("path", nargs="?", default="/")

    upload_parser = sub.add_parser("upload", help="Upload a local file")
    upload_parser.add_argument("file")
    upload_parser.add_argument("--to", default="/", help="Remote folder (default /)")

    args = parser.parse_args()
    setup_logging(level=args.log_level)
    settings = get_settings()

    if args.command == "authorize":
        code = asyncio.run(run_authorize(settings))
    elif args.command == "ls":
        code = asyncio.run(run_ls(settings, args.path))
    else:
        code = asyncio.run(run_upload(settings, args.file, args.to))
    sys.exit(code)


if __name__ == "__main__":
    main()
