"""Tests for the overlay lifecycle."""

import pytest

from rich_cores.overlay import Overlay


@pytest.fixture
def base(app, view):
    """The view's frame, as installed before any overlay opens."""
    view.register_handlers()
    return app.input.current


class TestLifecycle:
    def test_open_takes_priority(self, app, base):
        overlay = Overlay(app, "confirm", "body")
        overlay.open()
        assert overlay.is_open
        assert app.pages.has_page("confirm")
        assert app.input.current is overlay.frame

    def test_open_twice_is_noop(self, app, base):
        overlay = Overlay(app, "confirm", "body")
        overlay.open()
        overlay.open()
        assert len(app.input) == 2

    def test_escape_cancels_and_restores(self, app, base):
        cancelled = []
        overlay = Overlay(app, "confirm", "body", on_cancel=lambda: cancelled.append(True))
        overlay.open()

        assert app.handle_key("\x1b") is None
        assert cancelled == [True]
        assert not overlay.is_open
        assert not app.pages.has_page("confirm")
        assert app.input.current is base

    def test_close_is_idempotent(self, app, base):
        cancelled = []
        overlay = Overlay(app, "confirm", "body", on_cancel=lambda: cancelled.append(True))
        overlay.open()
        assert overlay.close() is True
        assert overlay.close() is False
        assert overlay.cancel() is False
        assert cancelled == []
        assert app.input.current is base

    def test_cancel_confirm_sequence_restores_original(self, app, base):
        first = Overlay(app, "confirm", "body")
        first.open()
        app.handle_key("\x1b")

        second = Overlay(app, "confirm", "body")
        second.open()
        second.close()

        assert app.input.current is base
        assert app.input.frames == [base]

    def test_empty_page_id_rejected(self, app):
        with pytest.raises(ValueError):
            Overlay(app, "", "body")


class TestKeys:
    def test_other_keys_delegate_to_lower_frames(self, app):
        seen = []
        app.input.push("base", lambda key: seen.append(key))
        Overlay(app, "info", "body").open()

        assert app.handle_key("x") is None
        assert seen == ["x"]

    def test_on_key_can_consume(self, app):
        seen = []
        app.input.push("base", lambda key: seen.append(key))
        handled = []
        Overlay(app, "info", "body", on_key=lambda key: handled.append(key)).open()

        app.handle_key("x")
        assert handled == ["x"]
        assert seen == []

    def test_not_cancellable_swallows_escape(self, app):
        seen = []
        app.input.push("base", lambda key: seen.append(key))
        overlay = Overlay(app, "progress", "body", cancellable=False)
        overlay.open()

        assert app.handle_key("\x1b") is None
        assert overlay.is_open
        assert seen == []


class TestNesting:
    def test_close_out_of_order(self, app, base):
        outer = Overlay(app, "outer", "outer body")
        inner = Overlay(app, "inner", "inner body")
        outer.open()
        inner.open()

        outer.close()
        assert app.input.current is inner.frame
        assert app.pages.front()[0] == "inner"

        app.handle_key("\x1b")
        assert app.input.current is base
        assert len(app.pages) == 0

    def test_escape_closes_innermost_only(self, app, base):
        outer = Overlay(app, "outer", "outer body")
        inner = Overlay(app, "inner", "inner body")
        outer.open()
        inner.open()

        app.handle_key("\x1b")
        assert outer.is_open and not inner.is_open
        assert app.input.current is outer.frame

    def test_same_page_id_nests(self, app, base):
        outer = Overlay(app, "info", "outer body")
        inner = Overlay(app, "info", "inner body")
        outer.open()
        inner.open()
        assert app.pages.names() == ["info", "info"]

        app.handle_key("\x1b")
        assert app.pages.front() == ("info", "outer body")
        assert app.input.current is outer.frame

        app.handle_key("\x1b")
        assert len(app.pages) == 0
        assert app.input.current is base
