"""Errors raised while loading plugins.

Every error carries a short top-level message and keeps the underlying
loader exception as ``__cause__`` so callers can report the whole chain::

    try:
        manager.load_plugin(path)
    except PluginError as exc:
        print(": ".join(exc.chain()))
"""
from __future__ import annotations

from pathlib import Path


class PluginError(RuntimeError):
    """Base class for plugin loading failures."""

    def chain(self) -> list[str]:
        """Return this error's message followed by each cause's message."""
        messages: list[str] = []
        current: BaseException | None = self
        seen: set[int] = set()
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            messages.append(str(current) or type(current).__name__)
            if current.__cause__ is not None:
                current = current.__cause__
            elif current.__suppress_context__:
                current = None
            else:
                current = current.__context__
        return messages


class LoadError(PluginError):
    """The plugin file could not be opened as a module."""


class SymbolResolutionError(PluginError):
    """The factory export is missing or not callable."""


class PluginFactoryError(PluginError):
    """The factory raised or returned something that is not a plugin."""


class PluginHookError(PluginError):
    """``on_plugin_load`` raised."""


class PluginBatchError(PluginError):
    """One or more plugins in a directory failed to load."""

    def __init__(self, failures: list[tuple[Path, PluginError]]):
        self.failures = failures
        names = ", ".join(path.name for path, _ in failures)
        super().__init__(f"Failed to load {len(failures)} plugin(s): {names}")

    def chain(self) -> list[str]:
        messages = [str(self)]
        for path, error in self.failures:
            messages.append(f"{path.name}: {': '.join(error.chain())}")
        return messages
