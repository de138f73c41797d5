"""plughost: load plugin modules at runtime and unload them cleanly.

A plugin is a module file exporting ``_plugin_create()``, a factory that
returns a ``Plugin`` instance.  ``PluginManager`` loads it, fires its
``on_plugin_load`` hook and keeps the module alive until every plugin has
seen ``on_plugin_unload``.
"""
from plughost.base import Plugin
from plughost.errors import (
    LoadError,
    PluginBatchError,
    PluginError,
    PluginFactoryError,
    PluginHookError,
    SymbolResolutionError,
)
from plughost.library import LibraryHandle, discover_libraries, library_suffixes
from plughost.manager import PluginManager

__all__ = [
    "Plugin",
    "PluginManager",
    "LibraryHandle",
    "discover_libraries",
    "library_suffixes",
    "PluginError",
    "LoadError",
    "SymbolResolutionError",
    "PluginFactoryError",
    "PluginHookError",
    "PluginBatchError",
]
