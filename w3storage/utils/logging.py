import atexit
import logging
import logging.handlers
import os
from pathlib import (
    Path,
)
import queue
import sys
from typing import (
    Any,
)

log_queue: "queue.Queue[Any]" = queue.Queue()

_current_listener: logging.handlers.QueueListener | None = None

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ROOT_LOGGER_NAME = "w3storage"


def _parse_debug_modules(debug_str: str) -> dict[str, int]:
    """
    Parse the W3STORAGE_DEBUG environment variable into module-specific levels.

    Format examples:
    - "DEBUG"  # All modules at DEBUG level
    - "w3storage.car.dag_size:DEBUG"  # Only the DAG walker at DEBUG
    - "car.dag_size:DEBUG"  # Same as above, w3storage prefix is optional
    - "w3storage.api:DEBUG,w3storage.cluster:INFO"  # Multiple modules
    """
    module_levels: dict[str, int] = {}

    if not debug_str or debug_str.isspace():
        return module_levels

    if ":" not in debug_str and debug_str.upper() in logging._nameToLevel:
        return {"": getattr(logging, debug_str.upper())}

    for part in debug_str.split(","):
        if ":" not in part:
            continue

        module, level = part.split(":", 1)
        level = level.strip().upper()

        if level not in logging._nameToLevel:
            continue

        module = module.strip()
        if module.startswith(f"{ROOT_LOGGER_NAME}."):
            module = module[len(ROOT_LOGGER_NAME) + 1 :]
        module = module.replace("/", ".").strip(".")

        module_levels[module] = getattr(logging, level)

    return module_levels


def setup_logging() -> None:
    """
    Set up logging configuration based on environment variables.

    Environment Variables:
        W3STORAGE_DEBUG
            Controls logging levels, e.g. "DEBUG" or
            "w3storage.api:DEBUG,w3storage.cluster:INFO". When unset, only
            warnings and errors reach stderr.

        W3STORAGE_DEBUG_FILE
            If set, records are also written to this file.

    Records are handed to a QueueHandler and written by a QueueListener
    thread, so request handlers never block on log I/O.
    """
    global _current_listener

    if _current_listener is not None:
        _current_listener.stop()
        _current_listener = None

    module_levels = _parse_debug_modules(os.environ.get("W3STORAGE_DEBUG", ""))

    formatter = logging.Formatter(DEFAULT_LOG_FORMAT)

    handlers: list[logging.StreamHandler[Any] | logging.FileHandler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    log_file = os.environ.get("W3STORAGE_DEBUG_FILE")
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    queue_handler = logging.handlers.QueueHandler(log_queue)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.addHandler(queue_handler)
    root_logger.propagate = False
    if "" in module_levels:
        root_logger.setLevel(module_levels[""])
    elif module_levels:
        root_logger.setLevel(logging.INFO)
    else:
        root_logger.setLevel(logging.WARNING)

    for module, level in module_levels.items():
        if module:
            logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{module}")
            logger.setLevel(level)

    _current_listener = logging.handlers.QueueListener(
        log_queue, *handlers, respect_handler_level=True
    )
    _current_listener.start()


@atexit.register
def cleanup_logging() -> None:
    """Clean up logging resources on exit."""
    global _current_listener
    if _current_listener is not None:
        _current_listener.stop()
        _current_listener = None
