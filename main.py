#!/usr/bin/env python3
"""Plugin host entry point.

Loads plugin libraries, reports what was loaded, then unloads everything.

Usage:
    python main.py                       # every plugin in config.PLUGIN_DIR
    python main.py path/to/plugin.py     # specific files
    python main.py --dir ./plugins --fail-fast
    python main.py --no-fail-fast        # override PLUGHOST_FAIL_FAST=1
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import config
from plughost import PluginError, PluginManager

log = logging.getLogger("plughost")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def _configure_logging() -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_error: OSError | None = None
    try:
        config.LOG_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.LOG_DIR / "plughost.log"))
    except OSError as exc:
        file_error = exc

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
    if file_error is not None:
        log.warning("File logging disabled, cannot write to %s: %s", config.LOG_DIR, file_error)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Load plugin libraries, list them and unload them again.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Plugin library files to load, in order.",
    )
    parser.add_argument(
        "--dir",
        default="",
        help="Plugin directory to scan (defaults to config.PLUGIN_DIR when no paths are given).",
    )
    parser.add_argument(
        "--fail-fast",
        action=argparse.BooleanOptionalAction,
        default=config.PLUGIN_FAIL_FAST,
        help="Stop at the first plugin that fails to load (default: PLUGHOST_FAIL_FAST).",
    )
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def run(args: argparse.Namespace) -> int:
    failed = False
    with PluginManager() as manager:
        for raw in args.paths:
            try:
                plugin = manager.load_plugin(raw)
            except PluginError as exc:
                failed = True
                print(f"error: {raw}: {': '.join(exc.chain())}")
                if args.fail_fast:
                    return 1
                continue
            log.info("Plugin loaded: %s", plugin.name())

        directory = Path(args.dir).expanduser() if args.dir else None
        if directory is None and not args.paths:
            directory = config.PLUGIN_DIR
        if directory is not None:
            try:
                manager.load_plugins(directory, fail_fast=args.fail_fast)
            except PluginError as exc:
                failed = True
                for line in exc.chain():
                    print(f"error: {line}")
                if args.fail_fast:
                    return 1

        for name in manager.plugin_names():
            print(name)
        print(f"Summary: plugins={len(manager.plugins)} libraries={len(manager.loaded_libraries)}")

    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging()
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
