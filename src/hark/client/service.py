"""
SpeechToText: programmatic interface to the speech-to-text service.

REST operations are coroutines on a shared ``httpx.AsyncClient``; streaming recognition hands
back a running RecognitionSession.
"""

import asyncio
import os
from collections.abc import Sequence
from typing import Any, BinaryIO, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from hark.client.audio import AudioSource
from hark.client.callback import RecognizeCallback
from hark.client.config import ServiceConfig, load_config_from_env
from hark.client.connection import WebSocketConnection, basic_auth_header, recognize_url
from hark.client.media import get_media_type_from_file, is_valid_media_type
from hark.client.session import DEFAULT_CHUNK_SIZE, RecognitionSession
from hark.common import Pretty, get_logger
from hark.errors import InvalidConfigurationError, ServiceResponseError
from hark.wire import (
  Corpora,
  Corpus,
  CustomWord,
  LanguageModel,
  LanguageModels,
  RecognitionJob,
  RecognitionJobs,
  RecognizeOptions,
  SpeechModel,
  SpeechModels,
  SpeechRecognitionResults,
  SpeechSession,
  Word,
  Words,
  WordSort,
  WordType,
)

logger = get_logger("svc")

M = TypeVar("M", bound=BaseModel)

type AudioInput = bytes | BinaryIO | str | os.PathLike[str]


def _require(value: Any, name: str) -> None:
  if value is None or (isinstance(value, str) and not value.strip()):
    raise InvalidConfigurationError(f"{name} cannot be empty")


def _segment(value: str) -> str:
  return quote(value, safe="")


def _flag(value: bool) -> str:
  return "true" if value else "false"


def _read_bytes(source: BinaryIO | str | os.PathLike[str]) -> bytes:
  """Read a whole file or path. Blocking, so callers run it in a worker thread."""
  match source:
    case str() | os.PathLike():
      with open(source, "rb") as f:
        return f.read()
    case _:
      return source.read()


class SpeechToText:
  """
  Client for the speech-to-text service.

  Use as an async context manager, or call ``aclose()`` when done, to release the HTTP
  connection pool.

  Args:
      config: Service location and credentials. Read from HARK_* environment variables when
        omitted.
      client: An ``httpx.AsyncClient`` to use instead of creating one. Its base URL and auth are
        left as they are.
  """

  def __init__(self, config: ServiceConfig | None = None, client: httpx.AsyncClient | None = None):
    self.config = config or load_config_from_env()

    credentials = self.config.credentials
    self._owns_client = client is None
    self._client = client or httpx.AsyncClient(
      base_url=self.config.url,
      auth=httpx.BasicAuth(*credentials) if credentials else None,
      headers={"Accept": "application/json", **self.config.headers},
      timeout=self.config.timeout,
    )

  async def aclose(self) -> None:
    if self._owns_client:
      await self._client.aclose()

  async def __aenter__(self) -> "SpeechToText":
    return self

  async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
    await self.aclose()

  async def _request(
    self,
    method: str,
    path: str,
    *,
    params: dict[str, str] | None = None,
    **kwargs: Any,
  ) -> httpx.Response:
    response = await self._client.request(method, path, params=params or None, **kwargs)
    logger.debug("Request", method=method, path=path, status=response.status_code)

    if response.is_success:
      return response

    try:
      body = response.json()
    except ValueError:
      body = response.text
    if isinstance(body, dict):
      message = body.get("error") or body.get("message") or response.reason_phrase
    else:
      message = body or response.reason_phrase
    logger.warning(
      "Request failed", method=method, path=path, status=response.status_code, body=Pretty(body)
    )
    raise ServiceResponseError(response.status_code, str(message), body)

  async def _fetch(self, model_type: type[M], method: str, path: str, **kwargs: Any) -> M:
    response = await self._request(method, path, **kwargs)
    return model_type.model_validate_json(response.content)

  # Models

  async def list_models(self) -> SpeechModels:
    """List the base models the service offers."""
    return await self._fetch(SpeechModels, "GET", "/v1/models")

  async def get_model(self, model_id: str) -> SpeechModel:
    _require(model_id, "model_id")
    return await self._fetch(SpeechModel, "GET", f"/v1/models/{_segment(model_id)}")

  # Sessions

  async def create_session(self, model: str | None = None) -> SpeechSession:
    """Create a server-side session that pins a recognition engine."""
    params = {"model": model} if model else None
    return await self._fetch(SpeechSession, "POST", "/v1/sessions", params=params)

  async def delete_session(self, session_id: str) -> None:
    _require(session_id, "session_id")
    await self._request("DELETE", f"/v1/sessions/{_segment(session_id)}")

  # Recognition

  async def _audio_body(
    self, audio: AudioInput, options: RecognizeOptions | None
  ) -> tuple[bytes, str]:
    _require(audio, "audio")

    content_type = options.content_type if options else None
    match audio:
      case bytes():
        body = audio
      case str() | os.PathLike():
        body = await asyncio.to_thread(_read_bytes, audio)
        content_type = content_type or get_media_type_from_file(audio)
      case _:
        body = await asyncio.to_thread(_read_bytes, audio)
        name = getattr(audio, "name", None)
        if content_type is None and isinstance(name, str):
          content_type = get_media_type_from_file(name)

    if not content_type:
      raise InvalidConfigurationError("content_type is required when it cannot be inferred")
    if not is_valid_media_type(content_type):
      logger.warning("Unrecognized audio media type", content_type=content_type)
    return body, content_type

  async def recognize(
    self, audio: AudioInput, options: RecognizeOptions | None = None
  ) -> SpeechRecognitionResults:
    """Transcribe a complete recording in one request.

    Args:
        audio: Audio bytes, a binary file object, or a path
        options: Recognition options. The content type may be left for inference from a file
          name only when no options are given.
    """
    body, content_type = await self._audio_body(audio, options)
    params = options.query_parameters() if options else None
    return await self._fetch(
      SpeechRecognitionResults,
      "POST",
      "/v1/recognize",
      params=params,
      content=body,
      headers={"Content-Type": content_type},
    )

  async def create_job(
    self,
    audio: AudioInput,
    options: RecognizeOptions | None = None,
    callback_url: str | None = None,
    events: Sequence[str] | None = None,
    user_token: str | None = None,
    results_ttl: int | None = None,
  ) -> RecognitionJob:
    """Submit a recording for asynchronous recognition."""
    body, content_type = await self._audio_body(audio, options)
    params = options.query_parameters() if options else {}
    if callback_url:
      params["callback_url"] = callback_url
    if events:
      params["events"] = ",".join(events)
    if user_token:
      params["user_token"] = user_token
    if results_ttl is not None:
      params["results_ttl"] = str(results_ttl)

    return await self._fetch(
      RecognitionJob,
      "POST",
      "/v1/recognitions",
      params=params,
      content=body,
      headers={"Content-Type": content_type},
    )

  async def check_job(self, job_id: str) -> RecognitionJob:
    _require(job_id, "job_id")
    return await self._fetch(RecognitionJob, "GET", f"/v1/recognitions/{_segment(job_id)}")

  async def check_jobs(self) -> RecognitionJobs:
    return await self._fetch(RecognitionJobs, "GET", "/v1/recognitions")

  async def delete_job(self, job_id: str) -> None:
    _require(job_id, "job_id")
    await self._request("DELETE", f"/v1/recognitions/{_segment(job_id)}")

  def recognize_using_websocket(
    self,
    audio: AudioSource,
    options: RecognizeOptions,
    callback: RecognizeCallback,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
  ) -> RecognitionSession:
    """
    Start streaming recognition and return the running session immediately.

    Must be called with an event loop running. Every outcome, failures included, is reported
    to ``callback``; ``callback.on_disconnected`` marks the end of the session.

    Raises:
        InvalidConfigurationError: A required argument is missing. No connection is attempted.
    """
    if audio is None:
      raise InvalidConfigurationError("An audio source is required")
    if options is None:
      raise InvalidConfigurationError("Recognition options are required")
    if callback is None:
      raise InvalidConfigurationError("A recognize callback is required")

    if self.config.websocket_url is None:
      raise InvalidConfigurationError("websocket_url is not configured")
    headers = dict(self.config.headers)
    if credentials := self.config.credentials:
      headers["Authorization"] = basic_auth_header(*credentials)

    connection = WebSocketConnection(
      url=recognize_url(self.config.websocket_url, options),
      headers=headers,
      open_timeout=self.config.timeout,
    )
    session = RecognitionSession(connection, audio, options, callback, chunk_size=chunk_size)
    return session.start()

  # Custom language models

  async def list_language_models(self, language: str | None = None) -> LanguageModels:
    params = {"language": language} if language else None
    return await self._fetch(LanguageModels, "GET", "/v1/customizations", params=params)

  async def get_language_model(self, customization_id: str) -> LanguageModel:
    _require(customization_id, "customization_id")
    return await self._fetch(
      LanguageModel, "GET", f"/v1/customizations/{_segment(customization_id)}"
    )

  async def create_language_model(
    self,
    name: str,
    base_model_name: str,
    dialect: str | None = None,
    description: str | None = None,
  ) -> LanguageModel:
    _require(name, "name")
    _require(base_model_name, "base_model_name")
    body = {"name": name, "base_model_name": base_model_name}
    if dialect:
      body["dialect"] = dialect
    if description:
      body["description"] = description
    return await self._fetch(LanguageModel, "POST", "/v1/customizations", json=body)

  async def delete_language_model(self, customization_id: str) -> None:
    _require(customization_id, "customization_id")
    await self._request("DELETE", f"/v1/customizations/{_segment(customization_id)}")

  async def train_language_model(
    self,
    customization_id: str,
    word_type_to_add: WordType | None = None,
    customization_weight: float | None = None,
  ) -> None:
    """Start training a custom model on its corpora and words. Training runs asynchronously."""
    _require(customization_id, "customization_id")
    params: dict[str, str] = {}
    if word_type_to_add:
      params["word_type_to_add"] = WordType(word_type_to_add).value
    if customization_weight is not None:
      params["customization_weight"] = str(customization_weight)
    await self._request(
      "POST", f"/v1/customizations/{_segment(customization_id)}/train", params=params
    )

  async def reset_language_model(self, customization_id: str) -> None:
    """Remove all corpora and words from a custom model."""
    _require(customization_id, "customization_id")
    await self._request("POST", f"/v1/customizations/{_segment(customization_id)}/reset")

  # Corpora

  def _corpora_path(self, customization_id: str, corpus_name: str | None = None) -> str:
    _require(customization_id, "customization_id")
    path = f"/v1/customizations/{_segment(customization_id)}/corpora"
    if corpus_name is not None:
      _require(corpus_name, "corpus_name")
      path += f"/{_segment(corpus_name)}"
    return path

  async def list_corpora(self, customization_id: str) -> Corpora:
    return await self._fetch(Corpora, "GET", self._corpora_path(customization_id))

  async def get_corpus(self, customization_id: str, corpus_name: str) -> Corpus:
    return await self._fetch(Corpus, "GET", self._corpora_path(customization_id, corpus_name))

  async def add_corpus(
    self,
    customization_id: str,
    corpus_name: str,
    corpus_file: bytes | BinaryIO | str | os.PathLike[str],
    allow_overwrite: bool | None = None,
  ) -> None:
    """Upload a plain text corpus to a custom model."""
    path = self._corpora_path(customization_id, corpus_name)
    _require(corpus_file, "corpus_file")

    if isinstance(corpus_file, bytes):
      text = corpus_file
    else:
      text = await asyncio.to_thread(_read_bytes, corpus_file)

    params = {"allow_overwrite": _flag(allow_overwrite)} if allow_overwrite is not None else None
    await self._request(
      "POST",
      path,
      params=params,
      files={"corpus_file": (corpus_name, text, "text/plain")},
    )

  async def delete_corpus(self, customization_id: str, corpus_name: str) -> None:
    await self._request("DELETE", self._corpora_path(customization_id, corpus_name))

  # Words

  def _words_path(self, customization_id: str, word_name: str | None = None) -> str:
    _require(customization_id, "customization_id")
    path = f"/v1/customizations/{_segment(customization_id)}/words"
    if word_name is not None:
      _require(word_name, "word_name")
      path += f"/{_segment(word_name)}"
    return path

  async def list_words(
    self,
    customization_id: str,
    word_type: WordType | None = None,
    sort: WordSort | None = None,
  ) -> Words:
    params: dict[str, str] = {}
    if word_type:
      params["word_type"] = WordType(word_type).value
    if sort:
      params["sort"] = WordSort(sort).value
    return await self._fetch(Words, "GET", self._words_path(customization_id), params=params)

  async def get_word(self, customization_id: str, word_name: str) -> Word:
    return await self._fetch(Word, "GET", self._words_path(customization_id, word_name))

  async def add_words(self, customization_id: str, words: Sequence[CustomWord]) -> None:
    """Add several words to a custom model's vocabulary."""
    path = self._words_path(customization_id)
    if not words:
      raise InvalidConfigurationError("words cannot be empty")
    for word in words:
      _require(word.word, "word")

    body = {"words": [word.model_dump(exclude_none=True) for word in words]}
    await self._request("POST", path, json=body)

  async def add_word(
    self, customization_id: str, word: CustomWord, word_name: str | None = None
  ) -> None:
    """Add or replace one word. The word is named by ``word_name``, or else by ``word.word``."""
    name = word_name or word.word
    _require(name, "word_name")
    path = self._words_path(customization_id, name)
    await self._request("PUT", path, json=word.model_dump(exclude_none=True))

  async def delete_word(self, customization_id: str, word_name: str) -> None:
    await self._request("DELETE", self._words_path(customization_id, word_name))
