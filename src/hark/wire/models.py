"""
Resource types returned by the REST endpoints.

Field names follow the service's JSON. Fields the service adds later are ignored.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

from .recognition import SpeechRecognitionResults


class SupportedFeatures(BaseModel):
  custom_language_model: bool = False
  speaker_labels: bool = False


class SpeechModel(BaseModel):
  """A base model the service can recognize speech with."""

  name: str
  rate: int | None = None
  language: str | None = None
  url: str | None = None
  description: str | None = None
  sessions: str | None = None
  supported_features: SupportedFeatures | None = None


class SpeechModels(BaseModel):
  models: list[SpeechModel] = Field(default_factory=list)


class SpeechSession(BaseModel):
  """A server-side session that pins a recognition engine for a sequence of requests."""

  session_id: str
  new_session_uri: str | None = None
  recognize: str | None = None
  recognizeWS: str | None = None
  observe_result: str | None = None


class JobStatus(StrEnum):
  WAITING = "waiting"
  PROCESSING = "processing"
  COMPLETED = "completed"
  FAILED = "failed"


class RecognitionJob(BaseModel):
  """An asynchronous recognition request."""

  id: str
  status: JobStatus
  created: str | None = None
  updated: str | None = None
  url: str | None = None
  user_token: str | None = None
  results: list[SpeechRecognitionResults] | None = None
  warnings: list[str] | None = None


class RecognitionJobs(BaseModel):
  recognitions: list[RecognitionJob] = Field(default_factory=list)


class LanguageModel(BaseModel):
  """A custom language model layered on top of a base model."""

  customization_id: str
  name: str | None = None
  language: str | None = None
  base_model_name: str | None = None
  dialect: str | None = None
  description: str | None = None
  owner: str | None = None
  created: str | None = None
  status: str | None = None
  progress: int | None = None
  warnings: str | None = None
  versions: list[str] | None = None


class LanguageModels(BaseModel):
  customizations: list[LanguageModel] = Field(default_factory=list)


class Corpus(BaseModel):
  """A body of text a custom language model is trained from."""

  name: str
  total_words: int | None = None
  out_of_vocabulary_words: int | None = None
  status: str | None = None
  error: str | None = None


class Corpora(BaseModel):
  corpora: list[Corpus] = Field(default_factory=list)


class CustomWord(BaseModel):
  """A word to add to a custom language model."""

  word: str | None = None
  """The word itself. Omitted when the word is named by the request path."""

  sounds_like: list[str] | None = None
  display_as: str | None = None


class Word(BaseModel):
  """A word in a custom language model's vocabulary."""

  word: str
  sounds_like: list[str] = Field(default_factory=list)
  display_as: str | None = None
  count: int | None = None
  source: list[str] = Field(default_factory=list)
  error: list[dict[str, str]] | None = None


class Words(BaseModel):
  words: list[Word] = Field(default_factory=list)


class WordType(StrEnum):
  """Which words to list or to add to the model during training."""

  ALL = "all"
  USER = "user"
  CORPORA = "corpora"


class WordSort(StrEnum):
  ALPHABETICAL = "alphabetical"
  COUNT = "count"
