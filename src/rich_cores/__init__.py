"""Rich-based terminal dashboard controller.

A CoreView is a refreshable, single-selection table with info, help and log
panels, breadcrumb navigation and modal dialogs, hosted by an Application
that owns the UI thread and the input handler stack.

Example:
    from rich_cores import Application, CoreView

    app = Application()
    view = CoreView(app, "Servers")
    view.set_table_headers(["ID", "Name", "Status"])
    view.set_refresh_callback(fetch_servers)
    view.register_handlers()
    view.start_auto_refresh(5)
    app.set_root(view)
    app.run()
"""

__version__ = "0.1.0"

from .app import Application
from .core import CoreView
from .dialogs import (
    ConfirmationDialog,
    DirBrowserAction,
    DirBrowserResult,
    DirectoryDialog,
    ErrorDialog,
    FuzzySearchDialog,
    FuzzySearchItem,
    InfoDialog,
    InputDialog,
    ListDialog,
    ProgressDialog,
    show_confirmation_dialog,
    show_directory_dialog,
    show_error_dialog,
    show_fuzzy_search_dialog,
    show_info_dialog,
    show_input_dialog,
    show_list_dialog,
    show_progress_dialog,
)
from .errors import ErrorHandler, ErrorLevel
from .input import HandlerFrame, InputDispatcher
from .keyhandler import (
    ACTION_BACK,
    ACTION_KEYPRESS,
    ACTION_NAVIGATE_BACK,
    ACTION_ROW_SELECTED,
)
from .logpanel import LogPanelHandler
from .metadata import PluginMetadata, StaticMetadata
from .overlay import Overlay
from .selection import NO_SELECTION
from .themes import DEFAULT_THEME, Theme, get_theme
from .viewfactory import DetailViewConfig, TableViewConfig, ViewFactory

__all__ = [
    "__version__",
    "Application",
    "CoreView",
    "ConfirmationDialog",
    "DirBrowserAction",
    "DirBrowserResult",
    "DirectoryDialog",
    "ErrorDialog",
    "FuzzySearchDialog",
    "FuzzySearchItem",
    "InfoDialog",
    "InputDialog",
    "ListDialog",
    "ProgressDialog",
    "show_confirmation_dialog",
    "show_directory_dialog",
    "show_error_dialog",
    "show_fuzzy_search_dialog",
    "show_info_dialog",
    "show_input_dialog",
    "show_list_dialog",
    "show_progress_dialog",
    "ErrorHandler",
    "ErrorLevel",
    "HandlerFrame",
    "InputDispatcher",
    "ACTION_BACK",
    "ACTION_KEYPRESS",
    "ACTION_NAVIGATE_BACK",
    "ACTION_ROW_SELECTED",
    "LogPanelHandler",
    "PluginMetadata",
    "StaticMetadata",
    "Overlay",
    "NO_SELECTION",
    "DEFAULT_THEME",
    "Theme",
    "get_theme",
    "DetailViewConfig",
    "TableViewConfig",
    "ViewFactory",
]
