import logging as _logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path.home() / ".plughost" / ".env")

_log = _logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_log_level(name: str, default: str) -> int:
    """Parse a logging level name with safe fallback on unknown values."""
    raw = os.getenv(name, default).strip().upper()
    level = _logging.getLevelName(raw)
    if not isinstance(level, int):
        _log.warning("Unknown log level %r in %s, using %s", raw, name, default)
        level = _logging.getLevelName(default)
    return level


# Paths
PROJECT_ROOT = Path(__file__).parent
LOG_DIR = Path(os.getenv("PLUGHOST_LOG_DIR", str(Path.home() / ".plughost" / "logs"))).expanduser()
LOG_LEVEL = _env_log_level("PLUGHOST_LOG_LEVEL", "INFO")

# Plugin discovery
PLUGIN_DIR = Path(os.getenv("PLUGHOST_PLUGIN_DIR", str(PROJECT_ROOT / "plugins"))).expanduser()
PLUGIN_ENABLED = _env_bool("PLUGHOST_PLUGIN_ENABLED", True)

# Batch loading stops at the first broken plugin when set; otherwise every
# candidate is tried and failures are reported together.
PLUGIN_FAIL_FAST = _env_bool("PLUGHOST_FAIL_FAST", False)

# Every plugin module must export a no-argument factory under this name
PLUGIN_FACTORY_SYMBOL = os.getenv("PLUGHOST_FACTORY_SYMBOL", "_plugin_create").strip() or "_plugin_create"

# sys.modules prefix for source plugins, keeps them out of the host's namespace
PLUGIN_MODULE_PREFIX = "plughost_plugin_"
