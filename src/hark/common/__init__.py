"""
hark common package.
"""

from hark.common.format import Bytes, Pretty, Seconds, Unit
from hark.common.logs import get_logger, setup_logging, setup_logging_from_env

__all__ = [
  "get_logger",
  "setup_logging",
  "setup_logging_from_env",
  "Bytes",
  "Pretty",
  "Seconds",
  "Unit",
]
