"""
hark wire protocol package.

Contains the message types and data structures exchanged with the speech-to-text service,
over the streaming channel and the REST endpoints.
"""

from .codec import InboundMessage, OutboundMessage, deserialize_message, serialize_message
from .messages import ErrorMessage, StartMessage, StateMessage, StopMessage
from .models import (
  Corpora,
  Corpus,
  CustomWord,
  JobStatus,
  LanguageModel,
  LanguageModels,
  RecognitionJob,
  RecognitionJobs,
  SpeechModel,
  SpeechModels,
  SpeechSession,
  Word,
  Words,
  WordSort,
  WordType,
)
from .options import RecognizeOptions
from .recognition import (
  SpeakerLabel,
  SpeechRecognitionAlternative,
  SpeechRecognitionResult,
  SpeechRecognitionResults,
)

__all__ = [
  "Corpora",
  "Corpus",
  "CustomWord",
  "ErrorMessage",
  "InboundMessage",
  "JobStatus",
  "LanguageModel",
  "LanguageModels",
  "OutboundMessage",
  "RecognitionJob",
  "RecognitionJobs",
  "RecognizeOptions",
  "SpeakerLabel",
  "SpeechModel",
  "SpeechModels",
  "SpeechRecognitionAlternative",
  "SpeechRecognitionResult",
  "SpeechRecognitionResults",
  "SpeechSession",
  "StartMessage",
  "StateMessage",
  "StopMessage",
  "Word",
  "WordSort",
  "WordType",
  "Words",
  "deserialize_message",
  "serialize_message",
]
