from __future__ import annotations

import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path

_LOGGER = logging.getLogger("wavegen.logging")
LOG_DIR_ENV = "WAVEGEN_LOG_DIR"
DEBUG_ENV = "WAVEGEN_DEBUG"
_LOG_FILE = "wavegen.log"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_configured = False


def get_log_dir() -> Path:
    configured = os.environ.get(LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "wavegen" / "logs"


def get_log_path() -> Path:
    return get_log_dir() / _LOG_FILE


def debug_enabled() -> bool:
    return bool(os.environ.get(DEBUG_ENV))


def configure_logging(*, force: bool = False) -> None:
    """Attach console and file handlers to the ``wavegen`` logger once."""
    global _configured
    if _configured and not force:
        return

    logger = logging.getLogger("wavegen")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Applications that configure the root logger keep their own console output.
    if force or not logging.getLogger().handlers:
        console = logging.StreamHandler(stream=sys.__stderr__)
        console.setLevel(logging.DEBUG if debug_enabled() else logging.WARNING)
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        logger.addHandler(console)

    try:
        get_log_dir().mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(get_log_path(), encoding="utf-8")
    except OSError as exc:
        _LOGGER.warning("Failed to configure file logging: %s", exc)
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
    _configured = True


def log_exception(context: str, exc: BaseException) -> Path | None:
    """Append a timestamped traceback for ``exc`` to the crash log."""
    path = get_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"[{datetime.now().isoformat()}] {context}: {exc!r}\n")
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=handle)
            handle.write("\n")
    except OSError as log_exc:
        _LOGGER.warning("Failed to write log file: %s", log_exc)
        return None
    return path
