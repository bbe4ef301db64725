"""Tests for the CoreView controller."""

import logging
import threading

import pytest

from rich_cores.core import CoreView
from rich_cores.metadata import StaticMetadata
from rich_cores.selection import NO_SELECTION

HEADERS = ["ID", "Name", "Status"]
ROWS = [["1", "a", "up"], ["2", "b", "down"]]


@pytest.fixture
def loaded(view):
    view.set_table_headers(HEADERS)
    view.set_table_data(ROWS)
    return view


def messages(view, level=None):
    return [e.message for e in view.logs.entries if level is None or e.level == level]


class TestConstruction:
    def test_initial_state(self, view):
        assert view.get_selected_row() == NO_SELECTION
        assert view.get_table_data() == []
        assert messages(view) == ["Plugin initialized"]
        assert view.key_bindings.as_dict() == {"R": "Refresh", "?": "Help", "ESC": "Back"}

    def test_not_registered_until_asked(self, app, view):
        assert len(app.input) == 0
        view.register_handlers()
        view.register_handlers()
        assert len(app.input) == 1


class TestSelectionRestore:
    def test_identity_follows_row_after_reload(self, loaded):
        loaded.select_row(1)
        loaded.set_table_data([["2", "b", "down"], ["1", "a", "up"]])
        assert loaded.get_selected_row() == 0

    def test_selection_key_restore(self, loaded):
        loaded.set_selection_key("Name")
        loaded.select_row(1)
        loaded.set_table_data([["9", "x", "up"], ["3", "b", "restarting"]])
        assert loaded.get_selected_row() == 1

    def test_no_match_clears_selection(self, loaded):
        loaded.select_row(0)
        loaded.set_table_data([["3", "c", "up"]])
        assert loaded.get_selected_row() == NO_SELECTION

    def test_nothing_selected_stays_none(self, loaded):
        loaded.set_table_data(list(reversed(ROWS)))
        assert loaded.get_selected_row() == NO_SELECTION

    def test_set_table_atomic(self, loaded):
        loaded.select_row(1)
        loaded.set_table(["ID", "Name", "Status", "Zone"], [["2", "b", "down", "eu"], ["1", "a", "up", "us"]])
        assert loaded.get_selected_row() == 0
        assert loaded.get_table_headers() == ["ID", "Name", "Status", "Zone"]

    def test_headers_change_keeps_index(self, loaded):
        loaded.select_row(1)
        loaded.set_table_headers(["A", "B", "C"])
        assert loaded.get_selected_row() == 1

    def test_append_keeps_selection(self, loaded):
        loaded.select_row(1)
        loaded.append_table_data([["3", "c", "up"]])
        assert loaded.get_selected_row() == 1
        assert len(loaded.get_table_data()) == 3


class TestSelectRow:
    def test_fires_callbacks(self, loaded, actions):
        selected = []
        loaded.set_row_selected_callback(selected.append)
        loaded.select_row(1)

        assert selected == [1]
        assert actions == [
            (
                "rowSelected",
                {
                    "rowIndex": 1,
                    "rowData": ["2", "b", "down"],
                    "namedData": {"ID": "2", "Name": "b", "Status": "down"},
                },
            )
        ]
        assert loaded.get_selected_row_data() == ["2", "b", "down"]

    def test_out_of_bounds_is_silent(self, loaded, actions):
        selected = []
        loaded.set_row_selected_callback(selected.append)
        before = len(loaded.logs)
        loaded.select_row(5)
        loaded.select_row(-1)
        assert selected == []
        assert actions == []
        assert len(loaded.logs) == before

    def test_cursor_movement_fires_nothing(self, loaded, actions):
        selected = []
        loaded.set_row_selected_callback(selected.append)
        loaded.handle_key("DOWN")
        loaded.handle_key("j")
        assert loaded.get_selected_row() == 1
        assert selected == []
        assert actions == []

    def test_enter_confirms(self, loaded, actions):
        selected = []
        loaded.set_row_selected_callback(selected.append)
        loaded.handle_key("DOWN")
        loaded.handle_key("ENTER")
        assert selected == [0]
        assert actions[0][0] == "rowSelected"

    def test_enter_without_selection(self, loaded, actions):
        assert loaded.handle_key("ENTER") is None
        assert actions == []

    def test_home_end(self, loaded):
        loaded.handle_key("END")
        assert loaded.get_selected_row() == 1
        loaded.handle_key("g")
        assert loaded.get_selected_row() == 0

    def test_clear_selection(self, loaded):
        loaded.select_row(0)
        loaded.clear_selection()
        assert loaded.get_selected_row() == NO_SELECTION
        assert loaded.get_selected_row_data() is None


class TestUpdateRow:
    def test_updates_in_place(self, loaded):
        loaded.update_row(0, ["1", "a", "down"])
        assert loaded.get_table_data()[0] == ["1", "a", "down"]

    def test_out_of_bounds_no_op(self, loaded):
        before = loaded.get_table_data()
        logs = len(loaded.logs)
        loaded.update_row(2, ["x", "y", "z"])
        assert loaded.get_table_data() == before
        assert len(loaded.logs) == logs


class TestRefresh:
    def test_success(self, loaded):
        loaded.set_refresh_callback(lambda: [["3", "c", "up"]])
        loaded.refresh_data()
        assert loaded.get_table_data() == [["3", "c", "up"]]
        assert messages(loaded)[-2:] == ["Refreshing data...", "Data refreshed successfully"]

    def test_fetch_error_leaves_data(self, loaded):
        def fail():
            raise ConnectionError("redis unreachable")

        loaded.set_refresh_callback(fail)
        before = loaded.get_table_data()
        errors_before = len(messages(loaded, "error"))

        loaded.refresh_data()

        assert loaded.get_table_data() == before
        errors = messages(loaded, "error")
        assert len(errors) == errors_before + 1
        assert errors[-1] == "Error refreshing data: redis unreachable"

    def test_fetch_error_logged_at_error_level(self, loaded, caplog):
        def fail():
            raise ConnectionError("redis unreachable")

        loaded.set_refresh_callback(fail)
        with caplog.at_level(logging.ERROR, logger="rich_cores.core"):
            loaded.refresh_data()
        [record] = [r for r in caplog.records if r.name == "rich_cores.core"]
        assert record.levelno == logging.ERROR
        assert "Refresh failed" in record.getMessage()

    def test_without_callback(self, loaded):
        before = len(loaded.logs)
        loaded.refresh_data()
        assert len(loaded.logs) == before

    def test_background_refresh_marshaled(self, app, loaded):
        loaded.set_refresh_callback(lambda: [["9", "z", "up"]])
        worker = threading.Thread(target=loaded.refresh_data)
        worker.start()
        worker.join()

        assert loaded.get_table_data() == ROWS
        app.process_pending()
        assert loaded.get_table_data() == [["9", "z", "up"]]

    def test_auto_refresh_delivers_rows(self, loaded, drain):
        fetched = threading.Event()

        def fetch():
            fetched.set()
            return [["5", "e", "up"]]

        loaded.set_refresh_callback(fetch)
        loaded.start_auto_refresh(0.01)
        try:
            assert fetched.wait(2)
            assert drain(lambda: loaded.get_table_data() == [["5", "e", "up"]])
        finally:
            loaded.stop_auto_refresh()

    def test_start_logs_and_restarts(self, loaded):
        loaded.start_auto_refresh(5)
        loaded.start_auto_refresh(5)
        assert loaded.auto_refresh_active
        assert messages(loaded).count("Auto-refresh enabled (5s)") == 2
        assert "Auto-refresh disabled" not in messages(loaded)
        loaded.stop_auto_refresh()
        assert messages(loaded)[-1] == "Auto-refresh disabled"

    def test_stop_when_inactive_logs_nothing(self, loaded):
        before = len(loaded.logs)
        loaded.stop_auto_refresh()
        loaded.stop_auto_refresh()
        assert len(loaded.logs) == before

    def test_default_interval_from_config(self, app, loaded):
        app.config["refresh_seconds"] = 7
        loaded.start_auto_refresh()
        try:
            assert loaded._refresher.interval == 7
        finally:
            loaded.stop_auto_refresh()

    def test_destroy_stops_and_unregisters(self, app, loaded):
        loaded.register_handlers()
        loaded.start_auto_refresh(5)
        loaded.destroy()
        assert not loaded.auto_refresh_active
        assert len(app.input) == 0


class TestLazyLoading:
    @pytest.fixture
    def paged(self, loaded):
        source = [[str(i), f"n{i}", "up"] for i in range(3, 8)]
        calls = []

        def loader(offset, limit):
            calls.append((offset, limit))
            return source[offset : offset + limit]

        loaded.set_lazy_loader(loader, page_size=2)
        loaded.calls = calls
        return loaded

    def test_binding_added(self, paged):
        assert paged.key_bindings.get("PGDN") == "Load more"
        assert paged.has_lazy_loader and paged.has_more_rows

    def test_pages_until_exhausted(self, paged):
        paged.load_more()
        paged.load_more()
        paged.load_more()
        assert paged.calls == [(0, 2), (2, 2), (4, 2)]
        assert len(paged.get_table_data()) == 2 + 5
        assert not paged.has_more_rows
        assert messages(paged)[-1] == "Loaded 1 more rows"

        paged.load_more()
        assert len(paged.calls) == 3
        assert messages(paged, "warning")[-1] == "No more rows to load"

    def test_empty_page_ends_loading(self, loaded):
        loaded.set_lazy_loader(lambda offset, limit: [], page_size=10)
        loaded.load_more()
        assert not loaded.has_more_rows
        assert loaded.get_table_data() == ROWS
        assert messages(loaded)[-1] == "No more rows to load"

    def test_pgdn_loads_instead_of_paging(self, paged, actions):
        paged.handle_key("PGDN")
        assert paged.calls == [(0, 2)]
        assert actions == []

    def test_keeps_selection(self, paged):
        paged.select_row(1)
        paged.load_more()
        assert paged.get_selected_row() == 1

    def test_loader_error_keeps_rows(self, loaded):
        def fail(offset, limit):
            raise TimeoutError("slow backend")

        loaded.set_lazy_loader(fail)
        loaded.load_more()
        assert loaded.get_table_data() == ROWS
        assert messages(loaded, "error")[-1] == "Error loading more: slow backend"
        assert loaded.has_more_rows

    def test_ignored_while_loading(self, loaded):
        calls = []

        def loader(offset, limit):
            calls.append(offset)
            loaded.load_more()
            return [["9", "z", "up"]]

        loaded.set_lazy_loader(loader, page_size=5)
        loaded.load_more()
        assert calls == [0]
        assert len(loaded.get_table_data()) == 3

    def test_default_page_size(self, loaded):
        calls = []
        loaded.set_lazy_loader(lambda offset, limit: calls.append(limit) or [], page_size=0)
        loaded.load_more()
        assert calls == [500]

    def test_removing_loader(self, paged):
        paged.set_lazy_loader(None)
        assert not paged.has_lazy_loader
        assert "PGDN" not in paged.key_bindings
        paged.handle_key("PGDN")
        assert paged.calls == []


class TestNavigation:
    def test_push_pop(self, view):
        view.push_view("Home")
        view.push_view("Servers")
        assert view.get_current_view() == "Servers"
        assert view.pop_view() == "Servers"
        assert view.pop_view() == ""
        assert view.get_view_stack() == ["Home"]

    def test_clear_views(self, view):
        view.set_view_stack(["Home", "A", "B"])
        view.clear_views()
        assert view.get_view_stack() == ["Home"]

    def test_copy_navigation_stack_from(self, app, view):
        other = CoreView(app, "Details")
        other.set_view_stack(["Home", "Servers", "web-01"])
        view.copy_navigation_stack_from(other)
        assert view.get_view_stack() == ["Home", "Servers", "web-01"]


class TestFilter:
    def test_filter_rows_and_log(self, loaded):
        loaded.set_filter_query("DOWN")
        assert loaded.get_table_data() == [["2", "b", "down"]]
        assert loaded.is_filtered
        assert messages(loaded)[-1] == "Filter 'DOWN': 1/2 rows"

    def test_filter_keeps_selected_row(self, loaded):
        loaded.select_row(1)
        loaded.set_filter_query("b")
        assert loaded.get_selected_row() == 0
        loaded.clear_filter()
        assert loaded.get_selected_row() == 1
        assert messages(loaded)[-1] == "Filter cleared"
        assert not loaded.is_filtered

    def test_filter_dialog_applies_query(self, app, loaded):
        loaded.enable_filter()
        loaded.open_filter_dialog()
        for key in "up":
            app.handle_key(key)
        app.handle_key("\r")
        assert loaded.filter_query == "up"
        assert not app.pages.has_page("input-modal")


class TestPanels:
    def test_info_map_sorted_and_aligned(self, view):
        view.set_info_map({"Status": "ok", "ID": "7", "Empty": ""})
        assert view._info.plain == "ID:     7\nStatus: ok"

    def test_info_metadata(self, view):
        view.set_info_metadata(StaticMetadata(name="redis", version="1.2.0"))
        assert "Plugin:  redis" in view._info.plain
        assert "Author" not in view._info.plain

    def test_clear_key_bindings(self, view):
        view.add_key_binding("C", "Connect")
        view.enable_filter()
        view.clear_key_bindings()
        assert set(view.key_bindings) == {"R", "?", "ESC", "/"}

    def test_clear_logs(self, view):
        view.clear_logs()
        assert len(view.logs) == 0


class TestRender:
    def test_renders_dashboard(self, console, loaded):
        loaded.set_view_stack(["Home", "Servers"])
        loaded.log("hello there")
        console.print(loaded)
        out = console.file.getvalue()
        assert "Home > Servers" in out
        assert "Status" in out
        assert "hello there" in out
        assert "<R>" in out

    def test_filter_in_title(self, console, loaded):
        loaded.set_filter_query("up")
        console.print(loaded)
        assert "(filter: up)" in console.file.getvalue()

    def test_scroll_markers(self, app, console, view):
        app.config["max_visible_rows"] = 5
        view.set_table_headers(["N"])
        view.set_table_data([[str(i)] for i in range(20)])
        view.handle_key("END")
        console.print(view)
        assert "15 more above" in console.file.getvalue()
