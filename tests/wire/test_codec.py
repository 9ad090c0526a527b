"""Tests for the streaming channel frame codec."""

import json

import pytest

from hark.errors import ProtocolError
from hark.wire import (
  ErrorMessage,
  RecognizeOptions,
  SpeechRecognitionResults,
  StartMessage,
  StateMessage,
  StopMessage,
  deserialize_message,
  serialize_message,
)


class TestSerializeMessage:
  """Test serialization of the control frames sent by the client."""

  def test_start_without_options(self):
    """Test that a bare start frame carries only the content type and the action, in order."""
    options = RecognizeOptions(content_type="audio/l16; rate=44000")

    data = serialize_message(StartMessage.from_options(options))

    assert data == '{"content-type":"audio/l16; rate=44000","action":"start"}'

  def test_stop(self):
    assert serialize_message(StopMessage()) == '{"action":"stop"}'

  def test_start_includes_set_options(self):
    """Test that set recognition parameters are added to the start frame."""
    options = RecognizeOptions(
      content_type="audio/flac",
      interim_results=True,
      max_alternatives=3,
      inactivity_timeout=30,
      keywords=["colorado", "tornado"],
      keywords_threshold=0.5,
    )

    data = json.loads(serialize_message(StartMessage.from_options(options)))

    assert data == {
      "content-type": "audio/flac",
      "action": "start",
      "interim_results": True,
      "max_alternatives": 3,
      "inactivity_timeout": 30,
      "keywords": ["colorado", "tornado"],
      "keywords_threshold": 0.5,
    }

  def test_start_excludes_url_options(self):
    """Test that the model and custom model never appear in the start frame."""
    options = RecognizeOptions(
      content_type="audio/wav",
      model="en-US_NarrowbandModel",
      customization_id="cust-1",
      customization_weight=0.3,
    )

    data = json.loads(serialize_message(StartMessage.from_options(options)))

    assert "model" not in data
    assert "customization_id" not in data
    assert data["customization_weight"] == 0.3

  def test_start_options_follow_action(self):
    """Test that recognition parameters come after the content type and action."""
    options = RecognizeOptions(content_type="audio/wav", timestamps=True)

    data = serialize_message(StartMessage.from_options(options))

    assert data.startswith('{"content-type":"audio/wav","action":"start",')


class TestDeserializeMessage:
  """Test decoding of the frames received from the service."""

  def test_state_with_empty_payload(self):
    message = deserialize_message('{"state": {}}')
    assert isinstance(message, StateMessage)

  def test_state_with_string_payload(self):
    message = deserialize_message('{"state": "listening"}')
    assert isinstance(message, StateMessage)
    assert message.state == "listening"

  def test_results(self):
    """Test that a results frame is decoded with its alternatives and flags."""
    frame = {
      "result_index": 2,
      "results": [
        {
          "final": True,
          "alternatives": [
            {
              "transcript": "several tornadoes touch down ",
              "confidence": 0.89,
              "timestamps": [["several", 1.0, 1.51], ["tornadoes", 1.51, 2.15]],
            }
          ],
        }
      ],
    }

    message = deserialize_message(json.dumps(frame))

    assert isinstance(message, SpeechRecognitionResults)
    assert message.result_index == 2
    assert message.final
    assert message.results[0].transcript == "several tornadoes touch down "
    assert message.results[0].alternatives[0].timestamps[1] == ("tornadoes", 1.51, 2.15)

  def test_results_accept_bytes(self):
    message = deserialize_message(b'{"results": [], "result_index": 0}')
    assert isinstance(message, SpeechRecognitionResults)
    assert not message.final

  def test_speaker_labels(self):
    """Test that speaker labels are read from their "from" key."""
    frame = {
      "speaker_labels": [{"from": 0.5, "to": 1.0, "speaker": 1, "confidence": 0.7, "final": True}]
    }

    message = deserialize_message(json.dumps(frame))

    assert isinstance(message, SpeechRecognitionResults)
    assert message.speaker_labels[0].from_ == 0.5
    assert message.speaker_labels[0].speaker == 1

  def test_unknown_fields_are_ignored(self):
    message = deserialize_message('{"state": {}, "extra": 1}')
    assert isinstance(message, StateMessage)

    message = deserialize_message('{"results": [], "something_new": true}')
    assert isinstance(message, SpeechRecognitionResults)

  def test_error(self):
    message = deserialize_message('{"error": "Model not found", "code": 404}')

    assert isinstance(message, ErrorMessage)
    assert message.error == "Model not found"
    assert message.code == 404
    assert not message.is_inactivity_timeout

  def test_error_wins_over_state(self):
    """Test that a frame carrying an error is an error, whatever else it holds."""
    message = deserialize_message('{"error": "boom", "state": {}}')
    assert isinstance(message, ErrorMessage)

  def test_inactivity_timeout(self):
    message = deserialize_message(
      '{"error": "Session timed out due to inactivity after 30 seconds."}'
    )

    assert isinstance(message, ErrorMessage)
    assert message.is_inactivity_timeout

  @pytest.mark.parametrize(
    "data",
    [
      "not json",
      "[1, 2, 3]",
      '"state"',
      '{"unrelated": 1}',
      '{"error": 42}',
      "",
    ],
  )
  def test_malformed_frames(self, data):
    """Test that frames matching no known shape raise ProtocolError."""
    with pytest.raises(ProtocolError):
      deserialize_message(data)
