"""Centralized logging configuration for hark using structlog."""

import logging
import os
import time
from typing import Any

import structlog
from structlog.dev import BRIGHT, DIM, RESET_ALL, Column, ConsoleRenderer, KeyValueColumnFormatter
from structlog.typing import EventDict, Processor, WrappedLogger

from hark.common.proc import FloatPrecisionProcessor, LoggerFilterProcessor

# Relative timestamps are measured from import time
_PROGRAM_START_TIME = time.time()

_RESET = "\x1b[0m"


def hex_to_ansi_fg(hex_color: int) -> str:
  """Convert hex color (e.g., 0x9ccfd8) to ANSI 24-bit foreground escape code."""
  r = (hex_color >> 16) & 0xFF
  g = (hex_color >> 8) & 0xFF
  b = hex_color & 0xFF
  return f"\x1b[38;2;{r};{g};{b}m"


_LEVEL_STYLES: dict[str, tuple[str, int]] = {
  "debug": ("dbug", 0x908CAA),
  "info": ("info", 0x9CCFD8),
  "warning": ("warn", 0xF6C177),
  "error": ("eror", 0xEB6F92),
  "exception": ("exc!", 0xEB6F92),
  "critical": ("crit", 0xEB6F92),
}


def _relative_time_processor(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
  """Stamp events with the time elapsed since startup, as +[mm:]ss.mmm."""
  elapsed = time.time() - _PROGRAM_START_TIME
  minutes, seconds = divmod(elapsed, 60)

  if minutes >= 1:
    event_dict["timestamp"] = f"+{int(minutes):02d}:{seconds:06.3f}"
  else:
    event_dict["timestamp"] = f"+{seconds:06.3f}"
  return event_dict


def _compact_level_processor(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
  """Replace the level with a colored four character tag."""
  level = event_dict.get("level")
  if level in _LEVEL_STYLES:
    tag, color = _LEVEL_STYLES[level]
    event_dict["level"] = f"[{hex_to_ansi_fg(color)}{tag}{_RESET}]"
  return event_dict


def _console_renderer() -> ConsoleRenderer:
  logger_name_formatter = KeyValueColumnFormatter(
    key_style=None,
    value_style=hex_to_ansi_fg(0x7D6B95),
    reset_style=RESET_ALL,
    value_repr=str,
    prefix="[",
    postfix="]",
  )

  return ConsoleRenderer(
    colors=True,
    columns=[
      Column(
        "",
        KeyValueColumnFormatter(
          key_style=hex_to_ansi_fg(0x6E6A86),
          value_style=hex_to_ansi_fg(0xF6C177),
          reset_style=RESET_ALL,
          value_repr=str,
        ),
      ),
      Column(
        "timestamp",
        KeyValueColumnFormatter(
          key_style=None,
          value_style=DIM,
          reset_style=RESET_ALL,
          value_repr=str,
        ),
      ),
      Column(
        "level",
        KeyValueColumnFormatter(
          key_style=None,
          value_style="",
          reset_style=RESET_ALL,
          value_repr=str,
        ),
      ),
      Column("logger", logger_name_formatter),
      Column(
        "event",
        KeyValueColumnFormatter(
          key_style=None,
          value_style=BRIGHT,
          reset_style=RESET_ALL,
          value_repr=str,
          width=30,
        ),
      ),
    ],
  )


def setup_logging(
  level: str = "INFO",
  json_output: bool = False,
  correlation_id: str | None = None,
  only_logger: str | None = None,
) -> None:
  """Configure structured logging for the application.

  :param level: Root log level name.
  :param json_output: Render JSON lines instead of colored console output.
  :param correlation_id: Bound into every event when provided.
  :param only_logger: When set, drop events from loggers outside this name.
  """
  shared_processors: list[Processor] = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.stdlib.ExtraAdder(),
    FloatPrecisionProcessor(digits=3),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
  ]

  if correlation_id:
    shared_processors.insert(0, structlog.contextvars.merge_contextvars)
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

  if json_output:
    shared_processors.append(structlog.processors.TimeStamper(fmt="iso"))
    log_renderer: Processor = structlog.processors.JSONRenderer()
  else:
    shared_processors += [_relative_time_processor, _compact_level_processor]
    log_renderer = _console_renderer()

  structlog.configure(
    processors=[structlog.stdlib.filter_by_level]
    + shared_processors
    + ([LoggerFilterProcessor(only_logger)] if only_logger else [])
    + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
  )

  formatter = structlog.stdlib.ProcessorFormatter(
    foreign_pre_chain=shared_processors,
    processors=[
      structlog.stdlib.ProcessorFormatter.remove_processors_meta,
      log_renderer,
    ],
  )

  handler = logging.StreamHandler()
  handler.setFormatter(formatter)
  root_logger = logging.getLogger()
  root_logger.handlers.clear()
  root_logger.addHandler(handler)
  root_logger.setLevel(level)

  # Library chatter only surfaces from WARNING up
  for liblog in [logging.getLogger(_liblog) for _liblog in ["websockets", "httpx", "httpcore"]]:
    liblog.handlers.clear()
    liblog.setLevel(logging.WARNING)
    liblog.propagate = True


def get_logger(
  name: str | None = None, *args: Any, **initial_values: Any
) -> structlog.stdlib.BoundLogger:
  """Get a structured logger instance."""
  return structlog.get_logger(*([name] + list(args)), **initial_values)


def setup_logging_from_env() -> None:
  """Setup logging using environment variables."""
  log_level = os.getenv("LOG_LEVEL", "INFO").upper()
  json_output = os.getenv("JSON_LOGS", "false").lower() in ("true", "1", "yes", "on")
  correlation_id = os.getenv("CORRELATION_ID")
  only_logger = os.getenv("LOG_ONLY") or None

  setup_logging(
    level=log_level,
    json_output=json_output,
    correlation_id=correlation_id,
    only_logger=only_logger,
  )
