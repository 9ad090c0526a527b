"""
Recognition result types.

The same shapes are returned by the batch endpoints and pushed as frames on the streaming
channel.
"""

from pydantic import BaseModel, ConfigDict, Field

type WordTimestamp = tuple[str, float, float]
"""A word with its start and end time in seconds, as ``[word, start, end]`` on the wire."""

type WordConfidence = tuple[str, float]
"""A word with its confidence score, as ``[word, confidence]`` on the wire."""


class SpeechRecognitionAlternative(BaseModel):
  """One transcript hypothesis for a result."""

  transcript: str

  confidence: float | None = None
  """Confidence of the whole transcript, only reported for final results."""

  timestamps: list[WordTimestamp] | None = None
  """Per-word timing, when ``timestamps`` was requested."""

  word_confidence: list[WordConfidence] | None = None
  """Per-word confidence, when ``word_confidence`` was requested."""


class KeywordResult(BaseModel):
  normalized_text: str
  start_time: float
  end_time: float
  confidence: float


class WordAlternative(BaseModel):
  confidence: float
  word: str


class WordAlternativeResults(BaseModel):
  start_time: float
  end_time: float
  alternatives: list[WordAlternative]


class SpeechRecognitionResult(BaseModel):
  """A stretch of transcribed speech. Interim results at an index are superseded by later ones."""

  final: bool = False
  """True once the service will no longer revise this result."""

  alternatives: list[SpeechRecognitionAlternative] = Field(default_factory=list)
  """Hypotheses ordered by decreasing confidence."""

  keywords_result: dict[str, list[KeywordResult]] | None = None

  word_alternatives: list[WordAlternativeResults] | None = None

  @property
  def transcript(self) -> str:
    """The best transcript, or an empty string when there are no alternatives."""
    return self.alternatives[0].transcript if self.alternatives else ""


class SpeakerLabel(BaseModel):
  """Attribution of the word spanning ``from_``..``to`` to a speaker."""

  model_config = ConfigDict(populate_by_name=True)

  from_: float = Field(alias="from")
  to: float
  speaker: int
  confidence: float
  final: bool = False


class SpeechRecognitionResults(BaseModel):
  """A batch of results, starting at ``result_index`` in the session's result sequence."""

  result_index: int | None = None

  results: list[SpeechRecognitionResult] = Field(default_factory=list)

  speaker_labels: list[SpeakerLabel] | None = None

  warnings: list[str] | None = None

  @property
  def final(self) -> bool:
    """True when every result in this batch is final."""
    return bool(self.results) and all(result.final for result in self.results)
