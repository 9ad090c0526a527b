"""Tests for recognition options."""

import pytest
from pydantic import ValidationError

from hark.wire import RecognizeOptions


class TestRecognizeOptions:
  """Test RecognizeOptions validation and parameter rendering."""

  def test_defaults(self):
    """Test that only the content type is required and everything else is unset."""
    options = RecognizeOptions(content_type="audio/wav")

    assert options.content_type == "audio/wav"
    assert options.model is None
    assert options.interim_results is None
    assert options.request_parameters() == {}
    assert options.url_parameters() == {}
    assert options.query_parameters() == {}

  def test_content_type_required(self):
    with pytest.raises(ValidationError):
      RecognizeOptions()

  def test_blank_content_type(self):
    with pytest.raises(ValidationError, match="content_type must not be blank"):
      RecognizeOptions(content_type="   ")

  def test_content_type_is_stripped(self):
    assert RecognizeOptions(content_type=" audio/flac ").content_type == "audio/flac"

  def test_unknown_option(self):
    """Test that misspelled options are rejected instead of silently dropped."""
    with pytest.raises(ValidationError):
      RecognizeOptions(content_type="audio/wav", interim_result=True)

  @pytest.mark.parametrize(
    "field,value",
    [
      ("customization_weight", 1.5),
      ("customization_weight", -0.1),
      ("max_alternatives", 0),
      ("inactivity_timeout", -1),
      ("keywords_threshold", 2.0),
      ("word_alternatives_threshold", -0.5),
    ],
  )
  def test_range_validation(self, field, value):
    with pytest.raises(ValidationError):
      RecognizeOptions(content_type="audio/wav", **{field: value})

  def test_immutable(self):
    options = RecognizeOptions(content_type="audio/wav")
    with pytest.raises(ValidationError):
      options.model = "en-US_BroadbandModel"

  def test_url_parameters(self):
    """Test that model selection options are split out for the URL."""
    options = RecognizeOptions(
      content_type="audio/wav",
      model="en-US_BroadbandModel",
      customization_id="foo",
      timestamps=True,
    )

    assert options.url_parameters() == {
      "customization_id": "foo",
      "model": "en-US_BroadbandModel",
    }
    assert options.request_parameters() == {"timestamps": True}

  def test_query_parameters(self):
    """Test that batch query parameters are rendered as strings, in declaration order."""
    options = RecognizeOptions(
      content_type="audio/wav",
      customization_id="foo",
      customization_weight=0.5,
      speaker_labels=True,
      profanity_filter=False,
      keywords=["a", "b"],
    )

    assert list(options.query_parameters().items()) == [
      ("customization_id", "foo"),
      ("customization_weight", "0.5"),
      ("profanity_filter", "false"),
      ("speaker_labels", "true"),
      ("keywords", "a,b"),
    ]
