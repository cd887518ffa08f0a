#!/usr/bin/env python3
"""
dbxsync - Mirror folder trees between local disk and Dropbox.

Command-line front end: link an account once, then download, upload,
list and size folders.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from dbxsync import __version__
from dbxsync.config import AppSettings
from dbxsync.core.formatting import format_duration, format_size, format_timestamp
from dbxsync.remote import DropboxAuth, DropboxStore, RemoteError, RemoteFolder
from dbxsync.sync import TransferEvent, TreeResult, TreeWalker


# ============================================================================
# Main Application
# ============================================================================


class SyncApp:
    """Main application controller."""

    def __init__(self, settings: AppSettings):
        self.settings = settings
        self.auth = DropboxAuth(
            settings.app_key,
            settings.app_secret or None,
            token_path=settings.token_path,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            chunk_size=settings.chunk_size,
        )
        self._walker = None

    def connect(self) -> DropboxStore:
        """Connect with the environment token, or the saved one."""
        return self.auth.reconnect(self.settings.access_token)

    @property
    def walker(self) -> TreeWalker:
        if self._walker is None:
            self._walker = TreeWalker(self.connect(), listener=self.on_transfer)
        return self._walker

    def on_transfer(self, event: TransferEvent):
        """Print one line per completed file."""
        arrow = "↓" if event.direction == "download" else "↑"
        print(f"  {arrow} {event.remote_path} ({format_size(event.size)})")

    def handle_link(self) -> int:
        """Link a Dropbox account interactively."""
        if not self.settings.is_configured:
            print("No app key configured. Set DROPBOX_APP_KEY or add app_key to settings.json.")
            return 1

        url = self.auth.start_link()
        print("1. Go to: " + url)
        print('2. Click "Allow" (you might have to log in first).')
        print("3. Copy the authorization code.")
        code = input("Enter the authorization code here: ")

        store = self.auth.finish_link(code)
        account = store.get_account()
        print(f"\nLinked as {account.display_name} <{account.email}>")
        return 0

    def handle_account(self) -> int:
        account = self.connect().get_account()
        print(f"{account.display_name} <{account.email}>")
        print(f"Account ID: {account.account_id}")
        return 0

    def handle_list(self, remote_path: str) -> int:
        """Print a recursive listing, indented by depth."""
        entries = self.walker.list_tree(remote_path)
        base_depth = remote_path.strip("/").count("/") + 1 if remote_path.strip("/") else 0
        for entry in entries:
            depth = entry.path.strip("/").count("/") - base_depth
            indent = "  " * max(depth, 0)
            if isinstance(entry, RemoteFolder):
                print(f"{indent}{entry.name}/")
            else:
                print(f"{indent}{entry.name}  {format_size(entry.size)}  {format_timestamp(entry.modified)}")
        print(f"\n{len(entries)} entries")
        return 0

    def handle_size(self, remote_path: str) -> int:
        size = self.walker.tree_size(remote_path)
        print(f"{format_size(size)} ({size} bytes)")
        return 0

    def handle_modified(self, remote_path: str) -> int:
        modified = self.connect().last_modified(remote_path)
        if modified is None:
            print(f"{remote_path} is a folder (no modification time)")
            return 1
        print(format_timestamp(modified))
        return 0

    def handle_download(self, remote_path: str, local_path: Path, resume: bool) -> int:
        print(f"Downloading {remote_path} -> {local_path}")
        start = time.time()
        result = self.walker.download_tree(remote_path, local_path, descend_existing=resume)
        self._print_summary("Downloaded", result, time.time() - start)
        return 0 if result.ok else 1

    def handle_upload(self, local_path: Path, remote_parent: str, overwrite: bool) -> int:
        if not local_path.is_dir():
            print(f"Not a directory: {local_path}")
            return 1
        print(f"Uploading {local_path} -> {remote_parent}")
        start = time.time()
        result = self.walker.upload_tree(local_path, overwrite=overwrite, remote_parent=remote_parent)
        self._print_summary("Uploaded", result, time.time() - start)
        return 0 if result.ok else 1

    @staticmethod
    def _print_summary(verb: str, result: TreeResult, elapsed: float):
        summary = f"\n{verb} {len(result.transferred)} files ({format_size(result.bytes_transferred)})"
        summary += f" in {format_duration(elapsed)}"
        if result.skipped:
            summary += f", {result.skipped} already present"
        print(summary)
        if result.failures:
            print(f"{len(result.failures)} failed:")
            for failure in result.failures:
                print(f"  ✗ {failure.path}: {failure.message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="dbxsync - Mirror folder trees between local disk and Dropbox"
    )
    parser.add_argument("--settings", type=Path, help="Path to settings.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("link", help="Link a Dropbox account")
    commands.add_parser("account", help="Show the linked account")

    ls = commands.add_parser("ls", help="List a remote folder recursively")
    ls.add_argument("path", nargs="?", default="/")

    size = commands.add_parser("size", help="Total size of a remote file or folder")
    size.add_argument("path", nargs="?", default="/")

    modified = commands.add_parser("modified", help="Last modification time of a remote file")
    modified.add_argument("path")

    download = commands.add_parser("download", help="Download a remote folder")
    download.add_argument("remote")
    download.add_argument("local", type=Path)
    download.add_argument(
        "--resume", action="store_true",
        help="Walk into local folders that already exist instead of skipping them",
    )

    upload = commands.add_parser("upload", help="Upload a local folder")
    upload.add_argument("local", type=Path)
    upload.add_argument("--parent", default="/", help="Remote folder to upload into")
    upload.add_argument(
        "--no-overwrite", dest="overwrite", action="store_false",
        help="Add files without replacing existing ones",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    app = SyncApp(AppSettings.load(args.settings))

    if args.command == "link":
        return app.handle_link()
    elif args.command == "account":
        return app.handle_account()
    elif args.command == "ls":
        return app.handle_list(args.path)
    elif args.command == "size":
        return app.handle_size(args.path)
    elif args.command == "modified":
        return app.handle_modified(args.path)
    elif args.command == "download":
        return app.handle_download(args.remote, args.local, args.resume)
    elif args.command == "upload":
        return app.handle_upload(args.local, args.parent, args.overwrite)
    return 2


def main(argv=None) -> int:
    """Entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(args)
    except RemoteError as e:
        print(f"Error: {e.message}")
        return 1
    except OSError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nCancelled by user.")
        sys.exit(0)
