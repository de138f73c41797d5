"""Example plugin: logs its own lifecycle.

Drop files like this one into ``config.PLUGIN_DIR`` (``PLUGHOST_PLUGIN_DIR``)
and run ``python main.py`` to load them.
"""
import logging

from plughost.base import Plugin

log = logging.getLogger(__name__)


class LoggerPlugin(Plugin):
    def name(self) -> str:
        return "Logger"

    def on_plugin_load(self) -> None:
        log.info("Logger plugin loaded")

    def on_plugin_unload(self) -> None:
        log.info("Logger plugin unloaded")


def _plugin_create() -> Plugin:
    return LoggerPlugin()
