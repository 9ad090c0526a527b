"""
Exception types raised by hark.

Synchronous misuse raises immediately. Failures inside a streaming session are never raised
across the asynchronous boundary; they are delivered to the session's callback as instances of
these classes.
"""


class HarkError(Exception):
  """Base class for every error raised or reported by hark."""


class InvalidConfigurationError(HarkError, ValueError):
  """A required argument is missing or an option is invalid."""


class SessionConnectionError(HarkError, ConnectionError):
  """The connection could not be established, or was lost unexpectedly."""


class ProtocolError(HarkError, ValueError):
  """A frame received from the service could not be understood."""


class AudioSourceError(HarkError):
  """The audio source of a streaming session failed while being read."""


class RemoteError(HarkError):
  """The service reported an error on the recognition channel."""

  def __init__(self, message: str, code: int | None = None):
    super().__init__(message)
    self.message = message
    self.code = code


class InactivityTimeoutError(RemoteError):
  """The service closed the session because no audio arrived for too long."""


class ServiceResponseError(HarkError):
  """A REST call returned a non-success status."""

  def __init__(self, status_code: int, message: str, body: object = None):
    super().__init__(f"{status_code}: {message}")
    self.status_code = status_code
    self.message = message
    self.body = body
