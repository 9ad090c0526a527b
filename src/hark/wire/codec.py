"""
Message codec for the streaming recognition channel.

Converts between frame objects and JSON text, hiding the details of Pydantic serialization.
"""

from typing import Annotated, Any

from pydantic import Discriminator, Tag, TypeAdapter, ValidationError

from hark.errors import ProtocolError

from .messages import ErrorMessage, StartMessage, StateMessage, StopMessage
from .recognition import SpeechRecognitionResults

type OutboundMessage = StartMessage | StopMessage

_RESULT_KEYS = ("results", "result_index", "speaker_labels")


def _inbound_tag(value: Any) -> str | None:
  """Name the frame variant from its keys. An error key wins over everything else."""
  if not isinstance(value, dict):
    return None
  if "error" in value:
    return "error"
  if "state" in value:
    return "state"
  if any(key in value for key in _RESULT_KEYS):
    return "results"
  return None


InboundMessage = Annotated[
  Annotated[ErrorMessage, Tag("error")]
  | Annotated[StateMessage, Tag("state")]
  | Annotated[SpeechRecognitionResults, Tag("results")],
  Discriminator(
    _inbound_tag,
    custom_error_type="unknown_frame",
    custom_error_message="Frame is not a state, results or error message",
  ),
]

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def serialize_message(message: OutboundMessage) -> str:
  """
  Serialize a control frame to a JSON string.

  Aliased keys are used and unset options are omitted, so a start frame with no options is
  exactly ``{"content-type":"...","action":"start"}``.

  Args:
      message: A start or stop frame

  Returns:
      JSON string representation of the frame
  """
  adapter = TypeAdapter(type(message))
  return adapter.dump_json(message, by_alias=True, exclude_none=True).decode("utf-8")


def deserialize_message(data: str | bytes) -> ErrorMessage | StateMessage | SpeechRecognitionResults:
  """
  Deserialize a JSON frame received from the service.

  Args:
      data: JSON text of the frame

  Returns:
      The frame as a state, results or error message

  Raises:
      ProtocolError: The frame is not JSON, or matches none of the known frame shapes
  """
  try:
    return _inbound_adapter.validate_json(data)
  except ValidationError as e:
    raise ProtocolError(f"Unreadable frame from service: {e.errors()[0]['msg']}") from e
