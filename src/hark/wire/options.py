"""
Recognition options shared by the streaming channel and the batch endpoints.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Options that select the recognition endpoint rather than tune a request. On the
# WebSocket channel they travel in the connection URL, never in the start frame.
URL_PARAMETERS = frozenset({"model", "customization_id"})


class RecognizeOptions(BaseModel):
  """Immutable recognition parameters. Unset options are left to the service defaults."""

  model_config = ConfigDict(frozen=True, extra="forbid")

  content_type: str
  """Audio media type, including the rate for raw formats, e.g. ``audio/l16; rate=16000``."""

  model: str | None = None
  """Base model name, e.g. ``en-US_BroadbandModel``."""

  customization_id: str | None = None
  """Custom language model to apply."""

  customization_weight: float | None = Field(default=None, ge=0.0, le=1.0)
  """Relative weight of the custom language model against the base model."""

  interim_results: bool | None = None
  """Whether to deliver partial hypotheses before each result is final."""

  timestamps: bool | None = None
  """Whether to include per-word start and end times."""

  word_confidence: bool | None = None
  """Whether to include per-word confidence scores."""

  max_alternatives: int | None = Field(default=None, gt=0)
  """Maximum number of alternative transcripts per result."""

  profanity_filter: bool | None = None
  """Whether to censor profanity in transcripts."""

  smart_formatting: bool | None = None
  """Whether to convert dates, times, numbers and similar into conventional forms."""

  speaker_labels: bool | None = None
  """Whether to identify which speaker said which word."""

  inactivity_timeout: int | None = Field(default=None, ge=0)
  """Seconds of silence after which the service closes the session. 0 disables the timeout.
  Advisory to the service only, it is not enforced by the client."""

  keywords: list[str] | None = None
  """Keywords to spot in the audio."""

  keywords_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
  """Minimum confidence for a keyword match to be reported."""

  word_alternatives_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
  """Minimum confidence for a word alternative to be reported."""

  @field_validator("content_type")
  @classmethod
  def validate_content_type(cls, value: str) -> str:
    value = value.strip()
    if not value:
      raise ValueError("content_type must not be blank")
    return value

  def url_parameters(self) -> dict[str, str]:
    """Options that belong in the request URL, with unset ones left out."""
    return {
      name: str(value)
      for name in sorted(URL_PARAMETERS)
      if (value := getattr(self, name)) is not None
    }

  def request_parameters(self) -> dict[str, Any]:
    """Recognition parameters (everything but content type and URL options) that are set."""
    return self.model_dump(exclude_none=True, exclude=URL_PARAMETERS | {"content_type"})

  def query_parameters(self) -> dict[str, str]:
    """All set options, except the content type, rendered as batch request query parameters."""
    params: dict[str, str] = {}
    for name, value in self.model_dump(exclude_none=True, exclude={"content_type"}).items():
      match value:
        case bool():
          params[name] = "true" if value else "false"
        case list():
          params[name] = ",".join(value)
        case _:
          params[name] = str(value)
    return params
