"""Plugin contract.

Provides:
  - ``Plugin``: abstract base every loaded plugin object implements

A plugin module exports a no-argument factory (``_plugin_create`` by
default) that builds and returns one ``Plugin`` instance.  The manager
owns that instance until ``PluginManager.unload()`` fires its unload hook.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Plugin(ABC):
    """Abstract base class for all plugins.

    Subclass this and implement ``name()``.  Override the two lifecycle
    hooks when the plugin holds resources.  Neither hook returns a value;
    an exception raised by ``on_plugin_load`` aborts the load, one raised
    by ``on_plugin_unload`` is logged and teardown continues.
    """

    @abstractmethod
    def name(self) -> str:
        """Stable, human readable identifier.  Must have no side effects."""
        ...

    def on_plugin_load(self) -> None:
        """Called exactly once, right after the factory built the plugin."""
        pass

    def on_plugin_unload(self) -> None:
        """Called exactly once, before the plugin is dropped.

        Release whatever ``on_plugin_load`` acquired (close connections,
        flush state, etc.).
        """
        pass

    def get_info(self) -> dict[str, Any]:
        """Return plugin metadata as a dict."""
        cls = type(self)
        return {
            "name": self.name(),
            "class": cls.__qualname__,
            "module": cls.__module__,
        }

    def __repr__(self) -> str:
        return f"<Plugin {self.name()} ({type(self).__qualname__})>"
