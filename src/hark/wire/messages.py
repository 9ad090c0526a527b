"""
Pydantic models for the frames of the streaming recognition channel.

Control frames flow from the client as JSON text; audio flows as binary frames and has no
model. The service answers with state, results and error frames, which carry no type field
and are told apart by their keys.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .options import RecognizeOptions


class StartMessage(BaseModel):
  """Opens recognition on the connection. Recognition parameters follow as extra keys."""

  model_config = ConfigDict(extra="allow", populate_by_name=True)

  content_type: str = Field(alias="content-type")
  action: Literal["start"] = "start"

  @classmethod
  def from_options(cls, options: RecognizeOptions) -> "StartMessage":
    return cls(content_type=options.content_type, **options.request_parameters())


class StopMessage(BaseModel):
  """Tells the service that no more audio will follow."""

  action: Literal["stop"] = "stop"


class StateMessage(BaseModel):
  """The service is ready for audio, or has finished with all audio sent so far."""

  state: Any = None


class ErrorMessage(BaseModel):
  """An error reported by the service. Recognition on the connection is over."""

  error: str
  code: int | None = None
  warnings: list[str] | None = None

  @property
  def is_inactivity_timeout(self) -> bool:
    """Whether the service dropped the session because no audio arrived in time."""
    return "inactivity" in self.error.lower()
