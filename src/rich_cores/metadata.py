"""Plugin metadata shown in a view's info panel.

Anything that exposes ``name``, ``version``, ``author`` and ``last_updated``
attributes satisfies PluginMetadata; no runtime type inspection is needed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class PluginMetadata(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def version(self) -> str: ...

    @property
    def author(self) -> str: ...

    @property
    def last_updated(self) -> str: ...


@dataclass(frozen=True)
class StaticMetadata:
    """Plain PluginMetadata implementation."""

    name: str
    version: str = ""
    author: str = ""
    last_updated: str = ""


def metadata_info(meta: PluginMetadata | None, plugin_name: str = "") -> dict[str, str]:
    """Info-panel mapping for a plugin.

    Without metadata only the plugin name is shown; empty fields are
    dropped later by ``CoreView.set_info_map``.
    """
    if meta is None:
        return {"Plugin": plugin_name} if plugin_name else {}
    return {
        "Plugin": meta.name or plugin_name,
        "Version": meta.version,
        "Author": meta.author,
        "Updated": meta.last_updated,
    }
