"""
Events produced by a streaming recognition session.

The session's network tasks only ever enqueue these; a single dispatcher task turns them into
callback invocations, which keeps delivery ordered and never concurrent.
"""

from dataclasses import dataclass

from hark.errors import HarkError, InactivityTimeoutError
from hark.wire import SpeechRecognitionResults


@dataclass(frozen=True, slots=True)
class Connected:
  pass


@dataclass(frozen=True, slots=True)
class Listening:
  pass


@dataclass(frozen=True, slots=True)
class Transcription:
  results: SpeechRecognitionResults


@dataclass(frozen=True, slots=True)
class TranscriptionComplete:
  pass


@dataclass(frozen=True, slots=True)
class Error:
  error: HarkError


@dataclass(frozen=True, slots=True)
class InactivityTimeout:
  error: InactivityTimeoutError


@dataclass(frozen=True, slots=True)
class Disconnected:
  pass


type SessionEvent = (
  Connected
  | Listening
  | Transcription
  | TranscriptionComplete
  | Error
  | InactivityTimeout
  | Disconnected
)
