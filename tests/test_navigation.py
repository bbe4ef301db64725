"""Tests for the navigation stack and breadcrumbs."""

from rich_cores.navigation import NavigationStack
from rich_cores.themes import DEFAULT_THEME


class TestNavigationStack:
    def test_push_and_current(self):
        nav = NavigationStack(["Home"])
        nav.push("Servers")
        assert nav.current == "Servers"
        assert nav.previous == "Home"
        assert nav.depth == 2

    def test_pop_returns_removed(self):
        nav = NavigationStack(["Home", "Servers"])
        assert nav.pop() == "Servers"
        assert nav.as_list() == ["Home"]

    def test_pop_at_root_is_noop(self):
        nav = NavigationStack(["Home"])
        assert nav.pop() == ""
        assert nav.as_list() == ["Home"]

    def test_pop_empty(self):
        nav = NavigationStack()
        assert nav.pop() == ""
        assert nav.current == ""

    def test_clear_keeps_root(self):
        nav = NavigationStack(["Home", "A", "B"])
        nav.clear()
        assert nav.as_list() == ["Home"]

    def test_clear_empty_stays_empty(self):
        nav = NavigationStack()
        nav.clear()
        assert nav.as_list() == []

    def test_set_replaces(self):
        nav = NavigationStack(["Home"])
        nav.set(["X", "Y"])
        assert nav.as_list() == ["X", "Y"]

    def test_copy_from_is_independent(self):
        src = NavigationStack(["Home", "Detail"])
        dst = NavigationStack(["Other"])
        dst.copy_from(src)
        src.push("More")
        assert dst.as_list() == ["Home", "Detail"]


class TestBreadcrumbs:
    def test_joined_with_separator(self):
        text = NavigationStack(["Home", "Servers", "web-01"]).render(">")
        assert text.plain == "Home > Servers > web-01"

    def test_active_view_styled_apart(self):
        text = NavigationStack(["Home", "Servers"]).render()
        styles = {text.plain[s.start : s.end]: s.style for s in text.spans}
        assert styles["Servers"] == DEFAULT_THEME.breadcrumb_active_style
        assert styles["Home"] == DEFAULT_THEME.breadcrumb_style

    def test_empty(self):
        assert NavigationStack().render().plain == ""
