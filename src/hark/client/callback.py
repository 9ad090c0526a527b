"""
The notification surface of a streaming recognition session.
"""

from hark.errors import HarkError, InactivityTimeoutError
from hark.wire import SpeechRecognitionResults


class RecognizeCallback:
  """
  Receives the events of one streaming recognition session.

  Subclass and override the events you care about; every method is a no-op by default.
  A session calls these methods one at a time, in event order, from its own dispatcher task
  on the event loop, so implementations need no locking of their own. They should return
  quickly: the next event waits for the current call to finish.

  ``on_disconnected`` is always the last call, and is made exactly once, whether the session
  ended cleanly, failed, or was closed by the caller.
  """

  def on_connected(self) -> None:
    """The connection is open and the start frame is about to be sent."""

  def on_listening(self) -> None:
    """The service is ready to receive audio."""

  def on_transcription(self, results: SpeechRecognitionResults) -> None:
    """A batch of interim or final results arrived."""

  def on_transcription_complete(self) -> None:
    """The service has returned every result for the audio sent. Called at most once."""

  def on_error(self, error: HarkError) -> None:
    """The session failed. Teardown follows unless the error was a recoverable bad frame."""

  def on_inactivity_timeout(self, error: InactivityTimeoutError) -> None:
    """The service closed the session because no audio arrived in time."""

  def on_disconnected(self) -> None:
    """The session is over."""
