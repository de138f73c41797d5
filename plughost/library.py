"""Library handles: plugin module files loaded from an explicit path.

A handle owns one module object created with ``importlib`` from a source
(``.py``) or compiled extension (``.so``/``.pyd``) file.  While open, the
module is registered in ``sys.modules`` so code inside it can import
itself and pickle its own classes; ``close()`` removes that entry and
drops the handle's reference.

Discovery rules for ``discover_libraries``:
  1. Only regular files in the directory (non-recursive)
  2. Files starting with ``_`` are skipped
  3. The file name must end with a platform library suffix
  4. Candidates are returned sorted by file name
"""
from __future__ import annotations

import importlib.machinery
import importlib.util
import itertools
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

import config

log = logging.getLogger(__name__)

_module_ids = itertools.count(1)


def library_suffixes() -> list[str]:
    """Return the file suffixes that can be opened as plugin libraries.

    Longest suffix first so ``.cpython-312-x86_64-linux-gnu.so`` wins over
    ``.so`` when matching.
    """
    suffixes = set(importlib.machinery.EXTENSION_SUFFIXES)
    suffixes.update(importlib.machinery.SOURCE_SUFFIXES)
    return sorted(suffixes, key=lambda s: (-len(s), s))


def _matching_suffix(path: Path) -> str | None:
    for suffix in library_suffixes():
        if path.name.endswith(suffix) and len(path.name) > len(suffix):
            return suffix
    return None


def _is_extension(suffix: str) -> bool:
    return suffix in importlib.machinery.EXTENSION_SUFFIXES


def discover_libraries(directory: Path) -> list[Path]:
    """Return candidate plugin library files in ``directory``."""
    if not directory.exists() or not directory.is_dir():
        return []

    candidates: list[Path] = []
    for entry in directory.iterdir():
        if entry.name.startswith("_") or not entry.is_file():
            continue
        if _matching_suffix(entry) is None:
            continue
        candidates.append(entry)
    return sorted(candidates, key=lambda p: p.name)


class LibraryHandle:
    """One loaded plugin module.

    Create with ``LibraryHandle.open(path)``.  Handles are meant to be
    owned by a ``PluginManager``, which releases them only after every
    plugin built from them has been unloaded.
    """

    def __init__(self, path: Path, module_name: str, module: ModuleType):
        self.path = path
        self.module_name = module_name
        self._module: ModuleType | None = module

    @classmethod
    def open(cls, path: str | Path) -> LibraryHandle:
        """Load and execute the module at ``path``.

        Raises ``FileNotFoundError`` for a missing file, ``ImportError``
        for an unsupported file type or an extension whose module name the
        host already uses, and whatever the module itself raises while
        executing.
        """
        lib_path = Path(path).expanduser().resolve()
        if not lib_path.is_file():
            raise FileNotFoundError(2, "No such plugin library", str(lib_path))

        suffix = _matching_suffix(lib_path)
        if suffix is None:
            raise ImportError(
                f"{lib_path.name} is not a loadable library "
                f"(expected one of: {', '.join(library_suffixes())})",
                path=str(lib_path),
            )

        if _is_extension(suffix):
            # The init function inside an extension is named after the module
            module_name = lib_path.name.split(".", 1)[0]
            if module_name in sys.modules:
                raise ImportError(
                    f"{lib_path.name}: module {module_name!r} is already loaded in the host",
                    name=module_name,
                    path=str(lib_path),
                )
        else:
            stem = lib_path.name[: -len(suffix)]
            module_name = f"{config.PLUGIN_MODULE_PREFIX}{stem}_{next(_module_ids)}"

        spec = importlib.util.spec_from_file_location(module_name, str(lib_path))
        if spec is None or spec.loader is None:
            raise ImportError(f"Invalid module spec for {lib_path}", path=str(lib_path))

        try:
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise

        log.debug("Opened library %s as %s", lib_path, module_name)
        return cls(lib_path, module_name, module)

    @property
    def closed(self) -> bool:
        return self._module is None

    def get(self, symbol: str) -> Any:
        """Resolve an exported name.  Raises ``AttributeError`` if absent."""
        if self._module is None:
            raise AttributeError(f"library {self.path.name} is closed")
        try:
            return getattr(self._module, symbol)
        except AttributeError:
            raise AttributeError(
                f"{self.path.name} has no exported symbol {symbol!r}"
            ) from None

    def close(self) -> None:
        """Release the module.  Safe to call more than once."""
        if self._module is None:
            return
        # CPython never unmaps an extension module; forgetting it is the best we can do
        if sys.modules.get(self.module_name) is self._module:
            del sys.modules[self.module_name]
        self._module = None
        log.debug("Closed library %s", self.path)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<LibraryHandle {self.path.name} ({state})>"
