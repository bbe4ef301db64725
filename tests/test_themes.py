from __future__ import annotations

from rich_cores import themes


def test_get_theme_default():
    assert themes.get_theme() is themes.DEFAULT_THEME


def test_get_theme_by_name():
    assert themes.get_theme("Ocean").name == "ocean"


def test_unknown_theme_falls_back():
    assert themes.get_theme("nope") is themes.DEFAULT_THEME


def test_env_used_without_name(monkeypatch):
    monkeypatch.setenv("RICH_CORES_THEME", "mono")
    assert themes.get_theme().name == "mono"
    assert themes.get_theme("ocean").name == "ocean"


def test_selected_style_differs_from_rows():
    for theme in themes.THEMES.values():
        assert theme.selected_style != theme.row_style
