"""rich-cores demo CLI: browse a directory tree in a CoreView dashboard."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from datetime import datetime
from pathlib import Path

from . import __version__
from .app import Application
from .config import get_config_dir, load_config
from .core import CoreView
from .dialogs import (
    DirBrowserAction,
    show_confirmation_dialog,
    show_directory_dialog,
    show_info_dialog,
    show_list_dialog,
    show_progress_dialog,
)
from .errors import ErrorHandler, ErrorLevel
from .keyhandler import ACTION_KEYPRESS, ACTION_NAVIGATE_BACK
from .keys import ESC
from .logpanel import LogPanelHandler
from .themes import THEMES, get_theme

logger = logging.getLogger(__name__)

HEADERS = ["Name", "Type", "Size", "Modified"]

SORT_CHOICES = [
    ["name", "Sort by name"],
    ["size", "Largest first"],
    ["modified", "Most recently modified first"],
]


def _human_size(size: int) -> str:
    for unit in ("B", "K", "M", "G"):
        if size < 1024:
            return f"{size}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}T"


def list_directory(path: Path, sort_by: str = "name") -> list[list[str]]:
    """Rows for the entries of ``path`` (directories first when sorted by name)."""
    entries = []
    with os.scandir(path) as it:
        for entry in it:
            if entry.name.startswith("."):
                continue
            try:
                stat = entry.stat()
            except OSError:
                continue
            is_dir = entry.is_dir()
            entries.append((entry.name, is_dir, 0 if is_dir else stat.st_size, stat.st_mtime))

    if sort_by == "size":
        entries.sort(key=lambda e: (-e[2], e[0].lower()))
    elif sort_by == "modified":
        entries.sort(key=lambda e: -e[3])
    else:
        entries.sort(key=lambda e: (not e[1], e[0].lower()))

    return [
        [
            name,
            "dir" if is_dir else "file",
            "" if is_dir else _human_size(size),
            datetime.fromtimestamp(mtime).strftime("%Y-%m-%d %H:%M"),
        ]
        for name, is_dir, size, mtime in entries
    ]


def _is_git_repo(path: Path) -> bool:
    return (path / ".git").exists()


class DirectoryDashboard:
    """Wires a CoreView to the filesystem."""

    def __init__(self, app: Application, root: Path):
        self.app = app
        self.path = root
        self.sort_by = "name"

        self.view = CoreView(app, "Files")
        self.errors = ErrorHandler(app, self.view.log)
        self.view.set_table_headers(HEADERS)
        self.view.set_selection_key("Name")
        self.view.set_view_stack([root.name or str(root)])
        self.view.set_refresh_callback(lambda: list_directory(self.path, self.sort_by))
        self.view.set_row_selected_callback(self.open_row)
        self.view.set_action_callback(self.on_action)
        self.view.enable_filter()
        for key, description in (
            ("i", "Info"),
            ("d", "Jump to dir"),
            ("s", "Sort"),
            ("x", "Clear log"),
        ):
            self.view.add_key_binding(key, description)
        self._update_info()

    def _update_info(self) -> None:
        self.view.set_info_map(
            {
                "Path": str(self.path),
                "Sort": self.sort_by,
                "Git": "yes" if _is_git_repo(self.path) else "",
            }
        )

    def change_dir(self, path: Path) -> None:
        self.path = path
        self.view.clear_selection()
        if self.view.is_filtered:
            self.view.clear_filter()
        self._update_info()
        self.view.refresh_data()

    # -- callbacks --

    def open_row(self, index: int) -> None:
        row = self.view.get_selected_row_data()
        if row is None or row[1] != "dir":
            return
        self.view.push_view(row[0])
        self.change_dir(self.path / row[0])

    def on_action(self, action: str, payload: dict) -> bool:
        if action == ACTION_NAVIGATE_BACK:
            self.change_dir(self.path.parent)
            return True
        if action != ACTION_KEYPRESS:
            return False

        key = payload.get("key")
        if key == "i":
            self.show_info()
        elif key == "d":
            show_directory_dialog(self.app, self.path, self.on_directory, is_target=_is_git_repo)
        elif key == "s":
            show_list_dialog(self.app, "Sort Files", SORT_CHOICES, self.on_sort)
        elif key == "x":
            show_confirmation_dialog(self.app, "Clear Log", "Clear all log messages?", self.on_clear_logs)
        else:
            return False
        return True

    def show_info(self) -> None:
        row = self.view.get_selected_row_data()
        if row is None:
            self.view.log("No entry selected", level="warning")
            return
        details = "\n".join(f"{header}: {value}" for header, value in zip(HEADERS, row) if value)
        show_info_dialog(self.app, row[0], details)

    def on_sort(self, result, cancelled: bool) -> None:
        if cancelled:
            return
        _index, self.sort_by = result
        self._update_info()
        self.view.refresh_data()

    def on_clear_logs(self, confirmed, cancelled: bool) -> None:
        if not cancelled and confirmed:
            self.view.clear_logs()

    def on_directory(self, result, cancelled: bool) -> None:
        if cancelled:
            return
        if result.action is DirBrowserAction.SCAN:
            self.scan(result.path)
            return
        self.view.set_view_stack([result.path.name or str(result.path)])
        self.change_dir(result.path)

    def scan(self, path: Path) -> None:
        """Count git repositories below ``path`` behind a progress dialog."""
        try:
            children = [p for p in path.iterdir() if p.is_dir() and not p.name.startswith(".")]
        except OSError as e:
            self.errors.handle_error(e, ErrorLevel.ERROR, "Scan Failed")
            return

        found: list[Path] = []

        def done(_result, cancelled: bool) -> None:
            if cancelled:
                self.view.log("Scan cancelled", level="warning")
            else:
                self.view.log(f"Found {len(found)} git repositories under {path}")

        progress = show_progress_dialog(
            self.app, f"Scanning {path.name or path}", max(1, len(children)), done, cancellable=True
        )

        def work() -> None:
            for i, child in enumerate(children, start=1):
                if not progress.is_open:
                    return
                if _is_git_repo(child):
                    found.append(child)
                progress.update_progress(i, child.name)
            if not children:
                progress.update_progress(1, "empty")

        threading.Thread(target=work, name="rich-cores-scan", daemon=True).start()


def _quit_handler(app: Application):
    def handle(key: str) -> str | None:
        if key in (ESC, "q"):
            app.stop()
            return None
        return key

    return handle


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="rich-cores",
        description="rich-cores: terminal table dashboard demo (directory browser)",
    )
    parser.add_argument("--version", action="version", version=f"rich-cores {__version__}")
    parser.add_argument("directory", nargs="?", default=".", help="Directory to browse (default: cwd)")
    parser.add_argument("--refresh", type=float, default=None, metavar="SECONDS", help="Auto-refresh interval (0 disables)")
    parser.add_argument("--theme", choices=sorted(THEMES), help="Color theme")
    parser.add_argument("--config", type=Path, help="Config file path")
    parser.add_argument("--log-file", type=Path, help="Log file (default: <config dir>/rich-cores.log)")
    return parser


def _setup_logging(log_file: Path | None) -> None:
    path = log_file or get_config_dir() / "rich-cores.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=path,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``rich-cores`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    root = Path(args.directory).expanduser().resolve()
    if not root.is_dir():
        parser.error(f"not a directory: {args.directory}")

    config = load_config(args.config)
    if args.theme:
        config["theme"] = args.theme
    _setup_logging(args.log_file)

    app = Application(config=config, theme=get_theme(config["theme"]))
    app.input.push("quit", _quit_handler(app))

    dashboard = DirectoryDashboard(app, root)
    view = dashboard.view
    panel_handler = LogPanelHandler(view)
    logger.addHandler(panel_handler)

    view.register_handlers()
    app.set_root(view)
    view.refresh_data()

    interval = config["refresh_seconds"] if args.refresh is None else args.refresh
    if interval > 0:
        view.start_auto_refresh(interval)

    logger.info("Browsing %s", root)
    try:
        app.run()
    except KeyboardInterrupt:
        return 130
    finally:
        view.destroy()
        logger.removeHandler(panel_handler)
    return 0


if __name__ == "__main__":
    sys.exit(main())
