"""
Structured logging (OpenTelemetry-compliant).

Produces structured log output following the OpenTelemetry Logging Data Model.
The native library emits the same shape when its logging is initialised with
``cdk.init_native_logging()``.

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("ffi")
    log.info("Loaded native library", extra={"path": str(path)})

    # Error message (includes code location automatically)
    log.error("Checksum mismatch", extra={"symbol": name})

Environment::

    CDK_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: info)
    CDK_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

from ._version import __version__

__all__ = ["logger", "setup_logging", "scoped_logger"]

# =============================================================================
# Levels and scopes
# =============================================================================

# OpenTelemetry severity text per Python level
_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

# Same names the native library accepts, plus "off"; Python has no TRACE.
_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
}

_CODE_LOCATION_LEVELS = frozenset({logging.DEBUG, logging.ERROR, logging.CRITICAL})

# Module name -> scope. Matched from the innermost package component outwards.
_MODULE_SCOPES = {
    "_bindings": "ffi",
    "_native": "ffi",
    "_status": "ffi",
    "_buffer": "ffi",
    "_codec": "ffi",
    "_handles": "handle",
    "_async": "async",
    "_callbacks": "callback",
    "db": "callback",
    "wallet": "wallet",
    "token": "wallet",
}


def _infer_scope(logger_name: str) -> str:
    """Scope for records logged without one, from the logger's module path."""
    parts = logger_name.split(".")
    for part in reversed(parts):
        if part in _MODULE_SCOPES:
            return _MODULE_SCOPES[part]
    return parts[-1] or "cdk"


def _scope_of(record: logging.LogRecord) -> str:
    return getattr(record, "scope", None) or _infer_scope(record.name)


def _strip_path_prefix(filepath: str) -> str:
    """Path relative to the package, for code locations."""
    marker = "cdk/"
    if marker in filepath:
        return filepath[filepath.index(marker) + len(marker) :]
    return filepath


# =============================================================================
# Formatters
# =============================================================================

# LogRecord attributes that are not caller-supplied ``extra`` fields.
_RECORD_FIELDS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "scope",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, in the OpenTelemetry log data model."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        # Python timestamps stop at microseconds; pad to nanoseconds.
        timestamp = f"{created:%Y-%m-%dT%H:%M:%S}.{created.microsecond * 1000:09d}Z"

        attributes: dict[str, Any] = {"scope": _scope_of(record)}
        attributes.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_FIELDS and not key.startswith("_")
        )
        if record.levelno in _CODE_LOCATION_LEVELS:
            attributes["code.filepath"] = _strip_path_prefix(record.pathname)
            attributes["code.lineno"] = record.lineno
        if record.exc_info:
            attributes["exception.stacktrace"] = self.formatException(record.exc_info)

        return json.dumps(
            {
                "timestamp": timestamp,
                "severityText": _SEVERITY.get(record.levelno, "INFO"),
                "body": record.getMessage(),
                "attributes": attributes,
                "resource": {"service.name": "cdk", "service.version": __version__},
            },
            separators=(",", ":"),
            default=str,
        )


class HumanFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL [scope] message (object) [file:line]`` for terminals."""

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _SCOPE_COLOR = "\x1b[36m"
    _LEVEL_COLORS = (
        (logging.ERROR, "\x1b[31m"),
        (logging.WARNING, "\x1b[33m"),
        (logging.INFO, ""),
        (logging.NOTSET, "\x1b[2m"),
    )

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _paint(self, text: str, color: str) -> str:
        if not self._use_colors or not color:
            return text
        return f"{color}{text}{self._RESET}"

    def format(self, record: logging.LogRecord) -> str:
        level_color = next(c for floor, c in self._LEVEL_COLORS if record.levelno >= floor)
        severity = _SEVERITY.get(record.levelno, "INFO")

        line = (
            f"{datetime.fromtimestamp(record.created, tz=timezone.utc):%H:%M:%S} "
            f"{self._paint(f'{severity:<5}', level_color)} "
            f"{self._paint(f'[{_scope_of(record)}]', self._SCOPE_COLOR)} "
            f"{record.getMessage()}"
        )

        object_type = getattr(record, "object_type", None)
        if object_type:
            line += f" ({object_type})"
        if record.levelno in _CODE_LOCATION_LEVELS:
            location = f"[{_strip_path_prefix(record.pathname)}:{record.lineno}]"
            line += " " + self._paint(location, self._DIM)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# =============================================================================
# Logger Setup
# =============================================================================


def _get_log_level() -> int:
    """Level named by CDK_LOG_LEVEL, INFO if unset or unknown."""
    return _LEVELS.get(os.environ.get("CDK_LOG_LEVEL", "info").lower(), logging.INFO)


def _get_log_format() -> str:
    """CDK_LOG_FORMAT, else human on a terminal and json when piped."""
    fmt = os.environ.get("CDK_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _create_handler(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


# Single logger for all of cdk
logger = logging.getLogger("cdk")


def _setup_default_handler() -> None:
    # Leave logging alone if the application configured the cdk logger first.
    if logger.handlers:
        return
    logger.addHandler(_create_handler(_get_log_format()))
    logger.setLevel(_get_log_level())


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
) -> None:
    """
    Configure cdk logging.

    Parameters
    ----------
    level : str or int, default "INFO"
        Log level. One of the CDK_LOG_LEVEL names in any case, or a logging
        constant like ``logging.DEBUG``.

    format : str, optional
        "json" or "human". Defaults to CDK_LOG_FORMAT, then TTY detection.

    Examples
    --------
    JSON output for machine parsing::

        >>> import cdk
        >>> cdk.setup_logging("INFO", format="json")

    Human-readable output::

        >>> cdk.setup_logging("DEBUG", format="human")
    """
    if isinstance(level, str):
        level = _LEVELS.get(level.lower(), logging.INFO)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(_create_handler(format.lower() if format else _get_log_format()))
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Adds the adapter's scope to every record, keeping per-call ``extra``."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """
    Return an adapter on the ``cdk`` logger that tags records with ``scope``.

    Scopes in use: "ffi", "handle", "async", "callback" and "wallet".

    Example::

        log = scoped_logger("callback")
        log.debug("Dispatch cancelled", extra={"method": "add_proofs"})
    """
    return _ScopedLoggerAdapter(logger, {"scope": scope})


# Initialize on import
_setup_default_handler()
