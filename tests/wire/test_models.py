"""Tests for REST resource models and result helpers."""

from hark.wire import (
  JobStatus,
  RecognitionJob,
  SpeechModels,
  SpeechRecognitionResult,
  SpeechRecognitionResults,
  Words,
)


def test_speech_models():
  models = SpeechModels.model_validate(
    {
      "models": [
        {
          "name": "en-US_BroadbandModel",
          "rate": 16000,
          "language": "en-US",
          "description": "US English broadband model.",
          "supported_features": {"custom_language_model": True, "speaker_labels": True},
        }
      ]
    }
  )

  assert models.models[0].name == "en-US_BroadbandModel"
  assert models.models[0].supported_features.speaker_labels is True


def test_recognition_job_status():
  job = RecognitionJob.model_validate({"id": "job-1", "status": "completed", "created": "now"})

  assert job.id == "job-1"
  assert job.status == JobStatus.COMPLETED


def test_words():
  words = Words.model_validate(
    {"words": [{"word": "IEEE", "sounds_like": ["I. triple E."], "count": 1, "source": ["user"]}]}
  )

  assert words.words[0].word == "IEEE"
  assert words.words[0].sounds_like == ["I. triple E."]


def test_result_without_alternatives_has_empty_transcript():
  assert SpeechRecognitionResult().transcript == ""


def test_results_final_requires_every_result_final():
  results = SpeechRecognitionResults.model_validate(
    {
      "results": [
        {"final": True, "alternatives": [{"transcript": "one "}]},
        {"final": False, "alternatives": [{"transcript": "tw"}]},
      ]
    }
  )

  assert not results.final
