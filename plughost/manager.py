"""Plugin manager: owns loaded libraries and the plugins built from them.

Any ``LibraryHandle`` we load has to outlive the plugins it produced.  The
plugin's class, methods and module globals live in that library, so
releasing it first leaves the plugin running against a torn-down module.
``unload()`` is therefore two-phase: every unload hook fires, in load
order, before any library is closed.

The ``plugins`` and ``loaded_libraries`` lists are public so a host can
extend the manager (call extra hooks on every plugin, reject plugins that
lack host-specific methods, etc.).  Mutate them only through
``load_plugin`` and ``unload``.

Usage::

    with PluginManager() as manager:
        manager.load_plugin("plugins/logger.py")
        manager.load_plugins(Path("plugins"))
    # every plugin unloaded, every library closed
"""
from __future__ import annotations

import logging
from pathlib import Path

import config
from plughost.base import Plugin
from plughost.errors import (
    LoadError,
    PluginBatchError,
    PluginError,
    PluginFactoryError,
    PluginHookError,
    SymbolResolutionError,
)
from plughost.library import LibraryHandle, discover_libraries

log = logging.getLogger(__name__)


class PluginManager:
    """Loads plugins, fires their lifecycle hooks and tracks their lifetimes.

    Not thread-safe: callers sharing a manager between threads must
    serialize access themselves.
    """

    def __init__(self, factory_symbol: str | None = None):
        self.plugins: list[Plugin] = []
        self.loaded_libraries: list[LibraryHandle] = []
        self.factory_symbol = factory_symbol or config.PLUGIN_FACTORY_SYMBOL

    def load_plugin(self, path: str | Path) -> Plugin:
        """Load a single plugin from the library at ``path``.

        Returns the loaded plugin.  Raises ``LoadError`` when the file
        cannot be opened (the manager is left untouched),
        ``SymbolResolutionError``/``PluginFactoryError`` when the library
        does not produce a plugin, and ``PluginHookError`` when
        ``on_plugin_load`` raises.  In the last three cases the library
        stays registered until ``unload()``.
        """
        plugin, _ = self._load_plugin(path)
        return plugin

    def _load_plugin(self, path: str | Path) -> tuple[Plugin, str]:
        try:
            lib = LibraryHandle.open(path)
        except Exception as exc:
            raise LoadError("Unable to load the plugin") from exc

        # Store the handle before touching it so it is released with the others
        self.loaded_libraries.append(lib)
        lib = self.loaded_libraries[-1]

        try:
            constructor = lib.get(self.factory_symbol)
        except AttributeError as exc:
            raise SymbolResolutionError(
                f"The `{self.factory_symbol}` symbol wasn't found."
            ) from exc
        if not callable(constructor):
            raise SymbolResolutionError(
                f"The `{self.factory_symbol}` symbol wasn't found."
            ) from TypeError(
                f"{self.factory_symbol} in {lib.path.name} is "
                f"{type(constructor).__name__}, not a callable"
            )

        plugin = self._take_plugin(constructor, lib)
        try:
            plugin_name = plugin.name()
        except Exception as exc:
            raise PluginFactoryError(
                f"The plugin from {lib.path.name} has no usable name"
            ) from exc
        log.debug("Loaded Plugin: %s", plugin_name)

        try:
            plugin.on_plugin_load()
        except Exception as exc:
            raise PluginHookError(
                f"on_plugin_load failed for plugin {plugin_name!r}"
            ) from exc

        self.plugins.append(plugin)
        return plugin, plugin_name

    @staticmethod
    def _take_plugin(constructor, lib: LibraryHandle) -> Plugin:
        """Call the factory and check what came back before owning it."""
        try:
            result = constructor()
        except Exception as exc:
            raise PluginFactoryError(
                f"The plugin factory in {lib.path.name} raised"
            ) from exc
        if result is None:
            raise PluginFactoryError(
                f"The plugin factory in {lib.path.name} returned None"
            )
        if not isinstance(result, Plugin):
            raise PluginFactoryError(
                f"The plugin factory in {lib.path.name} returned "
                f"{type(result).__name__}, not a Plugin"
            )
        return result

    def load_plugins(
        self,
        directory: str | Path,
        *,
        fail_fast: bool | None = None,
    ) -> list[str]:
        """Load every plugin library in ``directory``, sorted by file name.

        Parameters
        ----------
        directory : str | Path
            Directory to scan (non-recursive).
        fail_fast : bool | None
            Stop at the first failure instead of trying every candidate.
            Defaults to ``config.PLUGIN_FAIL_FAST``.

        Returns
        -------
        list[str]
            Names of plugins loaded by this call, in load order.

        Raises ``PluginBatchError`` listing every failed file once all
        candidates were tried, or the first ``PluginError`` in fail-fast
        mode.
        """
        if not config.PLUGIN_ENABLED:
            log.debug("Plugin system disabled (PLUGHOST_PLUGIN_ENABLED=False)")
            return []

        target_dir = Path(directory).expanduser()
        if fail_fast is None:
            fail_fast = config.PLUGIN_FAIL_FAST

        if not target_dir.exists():
            log.debug("Plugin directory does not exist: %s", target_dir)
            return []

        if not target_dir.is_dir():
            log.warning("Plugin path is not a directory: %s", target_dir)
            return []

        loaded_names: list[str] = []
        failures: list[tuple[Path, PluginError]] = []

        for lib_path in discover_libraries(target_dir):
            try:
                _, plugin_name = self._load_plugin(lib_path)
            except PluginError as exc:
                if fail_fast:
                    raise
                failures.append((lib_path, exc))
                log.error("Failed to load plugin from %s", lib_path, exc_info=True)
                continue
            loaded_names.append(plugin_name)
            log.info("Plugin loaded: %s from %s", plugin_name, lib_path.name)

        if loaded_names:
            log.info("Loaded %d plugin(s): %s", len(loaded_names), ", ".join(loaded_names))
        if failures:
            raise PluginBatchError(failures)

        return loaded_names

    def unload(self) -> None:
        """Unload all plugins, then close all libraries.

        Every plugin's ``on_plugin_unload()`` fires, in load order, before
        the first library is closed.  Hook failures are logged and never
        propagate.  Calling this on an empty manager does nothing.
        """
        if not self.plugins and not self.loaded_libraries:
            return

        log.debug("Unloading plugins")

        while self.plugins:
            plugin = self.plugins.pop(0)
            try:
                log.debug("Firing on_plugin_unload for %r", plugin.name())
                plugin.on_plugin_unload()
            except Exception:
                log.warning(
                    "Plugin %s on_plugin_unload failed",
                    type(plugin).__qualname__,
                    exc_info=True,
                )
            # Drop our last reference before any library is closed
            del plugin

        while self.loaded_libraries:
            lib = self.loaded_libraries.pop(0)
            lib.close()

    def plugin_names(self) -> list[str]:
        """Names of the loaded plugins, in load order."""
        return [p.name() for p in self.plugins]

    def library_paths(self) -> list[Path]:
        """Paths of the loaded libraries, in load order."""
        return [lib.path for lib in self.loaded_libraries]

    def __enter__(self) -> PluginManager:
        return self

    def __exit__(self, *exc_info) -> None:
        self.unload()

    def __del__(self):
        # Plugins always get their unload hook, however the manager goes away
        if getattr(self, "plugins", None) or getattr(self, "loaded_libraries", None):
            self.unload()

    def __len__(self) -> int:
        return len(self.plugins)

    def __repr__(self) -> str:
        return (
            f"<PluginManager [{len(self.plugins)} plugins, "
            f"{len(self.loaded_libraries)} libraries]>"
        )
