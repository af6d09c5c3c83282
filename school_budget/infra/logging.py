"""Logging bootstrap and crash reporting for the Infra layer.

The configuration lives in ``config/logging.yaml`` and is applied through
:func:`logging.config.dictConfig`. Every record is enriched with the
session context (session id, user, application, version) so lines coming
from one CLI run can be correlated with its error reports.
"""
from __future__ import annotations

import getpass
import logging
import logging.config
import os
import sys
import threading
import traceback
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType
from typing import Any, Callable

import yaml

DEFAULT_LOGGING_CONFIG = Path("config/logging.yaml")

_FALLBACK_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {"format": "%(levelname)s %(name)s | %(message)s"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "WARNING",
            "formatter": "console",
            "stream": "ext://sys.stderr",
        },
    },
    "root": {"level": "INFO", "handlers": ["console"]},
}


@dataclass(slots=True, frozen=True)
class LoggingContext:
    """Session metadata attached to log records and error reports.

    Example::

        >>> from pathlib import Path
        >>> ctx = LoggingContext(
        ...     application="school-budget",
        ...     version="0.1",
        ...     session_id="abc",
        ...     user="tester",
        ...     pid=123,
        ...     log_dir=Path("logs"),
        ...     error_dir=Path("logs/errors"),
        ... )
        >>> ctx.new_error_id().startswith("abc-")
        True
    """

    application: str
    version: str
    session_id: str
    user: str
    pid: int
    log_dir: Path
    error_dir: Path

    def new_error_id(self) -> str:
        return f"{self.session_id}-{uuid.uuid4().hex[:8]}"

    def write_error_report(self, *, error_id: str, message: str, traceback_text: str) -> Path:
        """Write a standalone error report file and return its path.

        Args:
            error_id: unique id of the failure, also put on the log line.
            message: one-line summary.
            traceback_text: full formatted traceback.
        """

        timestamp = datetime.now(timezone.utc)
        self.error_dir.mkdir(parents=True, exist_ok=True)
        report_path = self.error_dir / f"{error_id}-{timestamp.strftime('%Y%m%dT%H%M%SZ')}.log"
        lines = [
            f"application={self.application}",
            f"version={self.version}",
            f"session_id={self.session_id}",
            f"error_id={error_id}",
            f"user={self.user}",
            f"pid={self.pid}",
            f"timestamp={timestamp.isoformat().replace('+00:00', 'Z')}",
            "",
            message.strip(),
            "",
            traceback_text.strip(),
            "",
        ]
        report_path.write_text("\n".join(lines), encoding="utf-8")
        return report_path


class SessionContextFilter(logging.Filter):
    """Stamp session fields onto every record passing through."""

    def __init__(self, context: LoggingContext) -> None:
        super().__init__(name="")
        self._context = context

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = getattr(record, "session_id", self._context.session_id)
        record.user = getattr(record, "user", self._context.user)
        record.application = getattr(record, "application", self._context.application)
        record.app_version = getattr(record, "app_version", self._context.version)
        record.error_id = getattr(record, "error_id", "")
        record.report_path = getattr(record, "report_path", "")
        return True


def _attach_filter(target: logging.Logger, filter_obj: logging.Filter) -> None:
    # A previous session's filter would stamp its own session id first.
    for filterer in (target, *target.handlers):
        for existing in list(filterer.filters):
            if isinstance(existing, SessionContextFilter):
                filterer.removeFilter(existing)
        filterer.addFilter(filter_obj)


def _prepare_file_handlers(config: dict[str, Any], log_directory: Path | None) -> None:
    """Resolve file handler paths (relocating them under ``log_directory``)."""

    handlers = config.get("handlers", {})
    if not isinstance(handlers, dict):
        return
    for handler_cfg in handlers.values():
        if not isinstance(handler_cfg, dict):
            continue
        filename = handler_cfg.get("filename")
        if not filename or "FileHandler" not in str(handler_cfg.get("class", "")):
            continue
        file_path = Path(str(filename)).expanduser()
        if log_directory is not None and not file_path.is_absolute():
            file_path = log_directory / file_path.name
        file_path = file_path.resolve()
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handler_cfg["filename"] = str(file_path)


def setup_logging(
    config_path: str | Path = DEFAULT_LOGGING_CONFIG,
    log_dir: str | Path | None = None,
    *,
    required: bool = True,
) -> None:
    """Load the YAML logging configuration and apply it.

    Args:
        config_path: path of the YAML file.
        log_dir: directory that relative file handler paths are moved into.
        required: when ``False`` a missing file falls back to a stderr-only
            configuration instead of raising.

    Raises:
        FileNotFoundError: if the file is missing and ``required`` is set.
        ValueError: if the YAML document is not a mapping.
    """

    path = Path(config_path)
    if not path.exists():
        if required:
            raise FileNotFoundError(f"logging config not found: {path}")
        logging.config.dictConfig(_FALLBACK_CONFIG)
        return

    with path.open("r", encoding="utf-8") as handle:
        data: Any = yaml.safe_load(handle)
    if not isinstance(data, dict):
        raise ValueError("logging config must be a mapping")

    log_directory = Path(log_dir).expanduser().resolve() if log_dir else None
    _prepare_file_handlers(data, log_directory)
    logging.config.dictConfig(data)


def configure_logging(
    *,
    app_name: str,
    app_version: str,
    logger_name: str,
    config_path: str | Path = DEFAULT_LOGGING_CONFIG,
    log_dir: str | Path | None = None,
    required: bool = True,
) -> LoggingContext:
    """Apply the logging configuration and install the session filter.

    Returns:
        LoggingContext: the context of the current session.
    """

    log_directory = Path(log_dir).expanduser().resolve() if log_dir else Path("logs").resolve()
    setup_logging(config_path, log_directory, required=required)
    context = LoggingContext(
        application=app_name,
        version=app_version,
        session_id=uuid.uuid4().hex,
        user=getpass.getuser(),
        pid=os.getpid(),
        log_dir=log_directory,
        error_dir=log_directory / "errors",
    )
    filter_obj = SessionContextFilter(context)
    _attach_filter(logging.getLogger(), filter_obj)
    _attach_filter(logging.getLogger(logger_name), filter_obj)
    logging.captureWarnings(True)
    return context


def install_exception_hook(logger: logging.Logger, context: LoggingContext) -> Callable[[], None]:
    """Log unhandled exceptions and write an error report for each.

    Returns:
        Callable[[], None]: restores the previous hooks.
    """

    previous_sys_hook = sys.excepthook
    previous_thread_hook = threading.excepthook

    def _log_exception(
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_tb: TracebackType | None,
        source: str,
    ) -> None:
        error_id = context.new_error_id()
        report_path = context.write_error_report(
            error_id=error_id,
            message=f"{source}: {exc_value}",
            traceback_text="".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
        )
        logger.critical(
            "Unhandled exception from %s",
            source,
            exc_info=(exc_type, exc_value, exc_tb),
            extra={"error_id": error_id, "report_path": str(report_path)},
        )

    def handle_exception(
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_tb: TracebackType | None,
    ) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            _log_exception(exc_type, exc_value, exc_tb, source="main-thread")
        previous_sys_hook(exc_type, exc_value, exc_tb)

    def handle_thread_exception(args: threading.ExceptHookArgs) -> None:
        thread_name = getattr(args.thread, "name", "thread")
        _log_exception(args.exc_type, args.exc_value, args.exc_traceback, source=thread_name)
        previous_thread_hook(args)

    sys.excepthook = handle_exception
    threading.excepthook = handle_thread_exception

    def restore() -> None:
        sys.excepthook = previous_sys_hook
        threading.excepthook = previous_thread_hook

    return restore


__all__ = [
    "DEFAULT_LOGGING_CONFIG",
    "LoggingContext",
    "SessionContextFilter",
    "configure_logging",
    "install_exception_hook",
    "setup_logging",
]
