from structlog import DropEvent
from structlog.typing import EventDict, WrappedLogger


class LoggerFilterProcessor:
  """
  A structlog processor that keeps only events from one logger and its children.

  Must run after ``structlog.stdlib.add_logger_name``, which places the logger name
  under the ``logger`` key.

  Example usage:
      structlog.configure(
          processors=[
              structlog.stdlib.add_logger_name,
              LoggerFilterProcessor("hark.session"),
              structlog.processors.JSONRenderer(),
          ]
      )
  """

  def __init__(self, logger_name: str):
    """
    :param logger_name: Events from this logger, or from loggers whose names start
                        with ``<logger_name>.``, are kept. Everything else is dropped.
    """
    self.logger_name = logger_name

  def __call__(self, _: WrappedLogger, __: str, event_dict: EventDict):
    name = str(event_dict.get("logger") or "")
    if name == self.logger_name or name.startswith(f"{self.logger_name}."):
      return event_dict
    raise DropEvent
