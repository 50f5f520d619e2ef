"""structlog over stdlib logging.

Every event goes through the stdlib root logger, so one ``LoggingConfig``
fans out to any number of outputs, each with its own level and renderer.
Console outputs default to stderr: stdout is the MCP stdio channel and must
never receive log lines.

A request id is bound through structlog's context variables for the length of
one tool call and merged into every event logged during that call, including
events from worker threads started with ``asyncio.to_thread``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Literal
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from projectlens.config.models import LoggingConfig, LogOutputConfig

_REQUEST_ID_KEY = "request_id"

# Upstream loggers that emit one line per protocol message
_NOISY_LOGGERS = ("mcp.server.lowlevel.server", "fastmcp.server.context.to_client")

# First file output of the active configuration, for "see the log" pointers
_log_file_path: Path | None = None


def get_request_id() -> str | None:
    return structlog.contextvars.get_contextvars().get(_REQUEST_ID_KEY)


def set_request_id(request_id: str | None = None) -> str:
    """Bind a correlation id (generated when omitted) to the current context."""
    rid = request_id or uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(**{_REQUEST_ID_KEY: rid})
    return rid


def clear_request_id() -> None:
    structlog.contextvars.unbind_contextvars(_REQUEST_ID_KEY)


def get_log_file_path() -> Path | None:
    return _log_file_path


def _level(name: str | None, default: int = logging.INFO) -> int:
    if not name:
        return default
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default


_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
]


def _formatter(fmt: Literal["console", "json"], colors: bool) -> logging.Formatter:
    renderer: structlog.types.Processor
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_SHARED_PROCESSORS)


def _handler(output: LogOutputConfig, default_level: int) -> logging.Handler:
    handler: logging.Handler
    if output.destination in ("stderr", "stdout"):
        stream = sys.stderr if output.destination == "stderr" else sys.stdout
        handler = logging.StreamHandler(stream)
        colors = stream.isatty()
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        colors = False
    handler.setLevel(_level(output.level, default_level))
    handler.setFormatter(_formatter(output.format, colors))
    return handler


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Install logging for the process. Safe to call again; handlers are replaced.

    Args:
        config: Full multi-output configuration. When omitted, a single
            stderr output is built from ``json_format`` and ``level``.
        json_format: Render the default output as JSON lines.
        level: Level for the default output.
    """
    global _log_file_path
    from projectlens.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )
    default_level = _level(config.level)

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Uncached so a later configure_logging call takes effect everywhere
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        existing.close()
        root.removeHandler(existing)
    root.setLevel(default_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _log_file_path = None
    for output in config.outputs:
        if _log_file_path is None and output.destination not in ("stderr", "stdout"):
            _log_file_path = Path(output.destination)
        root.addHandler(_handler(output, default_level))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
