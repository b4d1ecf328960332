import json
import logging
import logging.handlers
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from gatherer.runtime_paths import resolve_log_root
from gatherer.settings import get_setting
from gatherer.time_utils import now_local

# Initialize system logger
_logger = logging.getLogger("gatherer")
_logger.setLevel(logging.INFO)

LOG_FILE_NAME = "gatherer.log"
CRASH_LOG_FILE_NAME = "gatherer_crash.log"
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def default_log_root() -> Path:
    return resolve_log_root(get_setting("gatherer_log_root"))


def setup_logging(workspace: Path):
    """Configures the rotating file handler for the log directory."""
    workspace.mkdir(parents=True, exist_ok=True)
    log_file = (workspace / LOG_FILE_NAME).resolve()

    for existing in list(_logger.handlers):
        if not isinstance(existing, logging.handlers.RotatingFileHandler):
            continue
        if existing.baseFilename == str(log_file):
            return
        # One log directory at a time; a new root replaces the old handler.
        _logger.removeHandler(existing)
        existing.close()

    # Rotating handler: 10MB per file, keep 5 backups
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10*1024*1024, backupCount=5, encoding="utf-8"
    )
    # Structured JSON format for machine parsing
    handler.setFormatter(logging.Formatter('%(message)s'))
    _logger.addHandler(handler)


# Global list of event subscribers (e.g. a UI status bar)
_subscribers: List[Callable[[Dict[str, Any]], None]] = []

def subscribe_to_events(callback: Callable[[Dict[str, Any]], None]):
    _subscribers.append(callback)

def unsubscribe_from_events(callback: Callable[[Dict[str, Any]], None]):
    if callback in _subscribers:
        _subscribers.remove(callback)


def log_event(event: str, data: Dict[str, Any] = None, workspace: Optional[Path] = None, level: str = "info", **kwargs) -> None:
    """
    Unified log router.

    Emits one JSON line per event to <log root>/gatherer.log and forwards the
    record to every subscriber. Extra keyword arguments are merged into data.
    """
    if data is None: data = {}
    if workspace is None:
        workspace = default_log_root()

    full_data = {**data, **kwargs}
    record = {
        "timestamp": now_local().isoformat(),
        "level": level,
        "event": event,
        "data": full_data,
    }

    setup_logging(workspace)
    _logger.log(_LEVELS.get(level, logging.INFO), json.dumps(record, ensure_ascii=False, default=str))

    for subscriber in _subscribers:
        try:
            subscriber(record)
        except (RuntimeError, ValueError, TypeError, OSError) as e:
            failure_record = {
                "timestamp": now_local().isoformat(),
                "level": "error",
                "event": "logging_subscriber_failed",
                "data": {"error": str(e)},
            }
            _logger.error(json.dumps(failure_record, ensure_ascii=False))


def read_events(workspace: Optional[Path] = None, event: Optional[str] = None) -> List[Dict[str, Any]]:
    """Reads back the JSON records of gatherer.log, optionally filtered by event name."""
    if workspace is None:
        workspace = default_log_root()
    log_path = workspace / LOG_FILE_NAME
    if not log_path.exists():
        return []

    records = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                continue
            if event and record.get("event") != event:
                continue
            records.append(record)
    return records


def log_crash(exception: Exception, traceback_str: str, workspace: Optional[Path] = None):
    """
    Safely logs a crash to a rotating file.
    """
    if workspace is None:
        workspace = default_log_root()

    workspace.mkdir(parents=True, exist_ok=True)
    crash_log = workspace / CRASH_LOG_FILE_NAME

    # Dedicated logger for crashes, separate from the event stream
    crash_logger = logging.getLogger("gatherer_crash")
    crash_logger.setLevel(logging.ERROR)

    if not any(getattr(h, "baseFilename", None) == str(crash_log.resolve()) for h in crash_logger.handlers):
        for stale in list(crash_logger.handlers):
            crash_logger.removeHandler(stale)
            stale.close()
        handler = logging.handlers.RotatingFileHandler(
            crash_log, maxBytes=5*1024*1024, backupCount=5, encoding="utf-8"
        )
        formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        crash_logger.addHandler(handler)

    crash_logger.error(f"CRITICAL CRASH: {type(exception).__name__}\n{traceback_str}")
