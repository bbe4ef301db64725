"""Factory helpers for the common CoreView setups."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .core import CoreView, RefreshCallback, RowSelectedCallback
from .keyhandler import ACTION_KEYPRESS

if TYPE_CHECKING:
    from .app import Application

DEFAULT_REFRESH_SECONDS = 10


@dataclass
class TableViewConfig:
    """Settings for ViewFactory.create_table_view.

    Attributes:
        title: View title.
        headers: Column names.
        refresh_func: Fetch function for refresh_data / auto-refresh.
        key_bindings: Extra key -> description bindings.
        selected_func: Called with the row index on Enter.
        initial_data: Rows loaded before the first refresh.
        auto_refresh: Start the refresh timer (requires refresh_func).
        refresh_seconds: Timer interval; 0 means the default (10s).
    """

    title: str
    headers: Sequence[str] = ()
    refresh_func: RefreshCallback | None = None
    key_bindings: Mapping[str, str] = field(default_factory=dict)
    selected_func: RowSelectedCallback | None = None
    initial_data: Sequence[Sequence[str]] | None = None
    auto_refresh: bool = False
    refresh_seconds: float = 0


@dataclass
class DetailViewConfig:
    """Settings for ViewFactory.create_detail_view.

    ``detail_func`` returns a property -> value mapping shown as a two
    column table. ``key_func`` receives the key of every bound keypress
    and returns True to claim it.
    """

    title: str
    header_text: str = ""
    key_bindings: Mapping[str, str] = field(default_factory=dict)
    detail_func: Callable[[], Mapping[str, Any]] | None = None
    key_func: Callable[[str], Any] | None = None


class ViewFactory:
    def __init__(self, app: "Application"):
        self.app = app

    def create_table_view(self, config: TableViewConfig) -> CoreView:
        view = CoreView(self.app, config.title)
        if config.headers:
            view.set_table_headers(config.headers)
        if config.refresh_func is not None:
            view.set_refresh_callback(config.refresh_func)
        if config.selected_func is not None:
            view.set_row_selected_callback(config.selected_func)

        view.register_standard_keys()
        for key, description in config.key_bindings.items():
            view.add_key_binding(key, description)

        if config.initial_data is not None:
            view.set_table_data(config.initial_data)

        if config.auto_refresh and config.refresh_func is not None:
            view.start_auto_refresh(config.refresh_seconds or DEFAULT_REFRESH_SECONDS)

        view.register_handlers()
        return view

    def create_detail_view(self, config: DetailViewConfig) -> CoreView:
        view = CoreView(self.app, config.title)
        if config.header_text:
            view.set_info_text(config.header_text)

        view.register_standard_keys()
        for key, description in config.key_bindings.items():
            view.add_key_binding(key, description)

        detail_func = config.detail_func
        if detail_func is not None:

            def fetch() -> list[list[str]]:
                return [[str(key), str(value)] for key, value in detail_func().items()]

            view.set_refresh_callback(fetch)
            view.set_table_headers(["Property", "Value"])
            view.refresh_data()

        key_func = config.key_func
        if key_func is not None:

            def on_action(action: str, payload: dict[str, Any]) -> Any:
                if action == ACTION_KEYPRESS and isinstance(payload.get("key"), str):
                    return key_func(payload["key"])
                return None

            view.set_action_callback(on_action)

        view.register_handlers()
        return view
