"""
Streaming recognition over a persistent WebSocket.

A RecognitionSession drives one recognition from connect to disconnect. Three tasks share the
work: the runner opens the connection and consumes frames from the service, the audio pump
forwards chunks from the audio source, and the dispatcher delivers events to the caller's
callback one at a time, in the order they happened.
"""

import asyncio
import secrets
import time
from enum import StrEnum

from hark.client.audio import AudioSource
from hark.client.callback import RecognizeCallback
from hark.client.connection import WebSocketConnection
from hark.client.events import (
  Connected,
  Disconnected,
  Error,
  InactivityTimeout,
  Listening,
  SessionEvent,
  Transcription,
  TranscriptionComplete,
)
from hark.common import Bytes, Seconds, get_logger
from hark.errors import (
  AudioSourceError,
  HarkError,
  InactivityTimeoutError,
  InvalidConfigurationError,
  ProtocolError,
  RemoteError,
  SessionConnectionError,
)
from hark.wire import ErrorMessage, RecognizeOptions, SpeechRecognitionResults, StateMessage

logger = get_logger("session")

DEFAULT_CHUNK_SIZE = 4096
"""Largest audio chunk, in bytes, sent as one binary frame."""


class ConnectionState(StrEnum):
  IDLE = "idle"
  CONNECTING = "connecting"
  LISTENING = "listening"
  STREAMING = "streaming"
  STOPPING = "stopping"
  CLOSED = "closed"
  ERRORED = "errored"


_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
  ConnectionState.IDLE: frozenset(
    {ConnectionState.CONNECTING, ConnectionState.CLOSED, ConnectionState.ERRORED}
  ),
  ConnectionState.CONNECTING: frozenset(
    {ConnectionState.LISTENING, ConnectionState.CLOSED, ConnectionState.ERRORED}
  ),
  ConnectionState.LISTENING: frozenset(
    {
      ConnectionState.STREAMING,
      ConnectionState.STOPPING,
      ConnectionState.CLOSED,
      ConnectionState.ERRORED,
    }
  ),
  ConnectionState.STREAMING: frozenset(
    {
      ConnectionState.LISTENING,
      ConnectionState.STOPPING,
      ConnectionState.CLOSED,
      ConnectionState.ERRORED,
    }
  ),
  ConnectionState.STOPPING: frozenset({ConnectionState.CLOSED, ConnectionState.ERRORED}),
  ConnectionState.CLOSED: frozenset(),
  ConnectionState.ERRORED: frozenset(),
}


class RecognitionSession:
  """
  One streaming recognition, from connect to disconnect.

  ``start()`` returns at once; all I/O happens in tasks on the running event loop. Failures
  are reported through the callback and never raised to the caller, and the callback's
  ``on_disconnected`` always closes the session, exactly once. A session is not reusable:
  to recognize again, or to reconnect after a failure, create a new one.

  Usage:
      session = RecognitionSession(connection, audio, options, callback).start()
      ...
      await session.wait_closed()
  """

  def __init__(
    self,
    connection: WebSocketConnection,
    audio: AudioSource,
    options: RecognizeOptions,
    callback: RecognizeCallback,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
  ):
    if connection is None:
      raise InvalidConfigurationError("A connection is required")
    if audio is None:
      raise InvalidConfigurationError("An audio source is required")
    if options is None:
      raise InvalidConfigurationError("Recognition options are required")
    if callback is None:
      raise InvalidConfigurationError("A recognize callback is required")
    if chunk_size <= 0:
      raise InvalidConfigurationError(f"chunk_size must be positive, got {chunk_size}")

    self._connection = connection
    self._audio = audio
    self._options = options
    self._callback: RecognizeCallback | None = callback
    self._chunk_size = chunk_size

    self._state = ConnectionState.IDLE
    self._events: asyncio.Queue[SessionEvent] = asyncio.Queue()
    self._listening = asyncio.Event()

    self._loop: asyncio.AbstractEventLoop | None = None
    self._runner: asyncio.Task[None] | None = None
    self._pump: asyncio.Task[None] | None = None
    self._dispatcher: asyncio.Task[None] | None = None

    self._running = False
    self._close_requested = False
    self._tearing_down = False
    self._stop_sent = False
    self._complete = False
    self._failed = False

    self._bytes_sent = 0
    self._started_at = 0.0
    self._log = logger.bind(session=secrets.token_hex(2))

  @property
  def state(self) -> ConnectionState:
    return self._state

  @property
  def options(self) -> RecognizeOptions:
    return self._options

  @property
  def bytes_sent(self) -> int:
    """Audio bytes sent to the service so far."""
    return self._bytes_sent

  def start(self) -> "RecognitionSession":
    """Begin the session on the running event loop and return immediately."""
    if self._runner is not None or self._state != ConnectionState.IDLE:
      raise RuntimeError("A recognition session can only be started once")

    self._loop = asyncio.get_running_loop()
    self._dispatcher = self._loop.create_task(self._dispatch())
    self._runner = self._loop.create_task(self._run())
    return self

  def close(self) -> None:
    """
    Stop the session as soon as possible. Safe to call from any thread, in any state, any
    number of times. No transcription events are delivered once this has been called.
    """
    if self._close_requested:
      return
    self._close_requested = True

    if self._runner is None:
      # Never started, so there is no dispatcher: settle here
      callback, self._callback = self._callback, None
      if self._transition(ConnectionState.CLOSED) and callback is not None:
        callback.on_disconnected()
      return

    assert self._loop is not None
    try:
      self._loop.call_soon_threadsafe(self._cancel_runner)
    except RuntimeError:
      # The loop is closed, and the session ended with it
      pass

  async def wait_closed(self) -> None:
    """Wait until the session has ended and ``on_disconnected`` has been delivered."""
    if self._runner is None:
      return
    await asyncio.shield(self._runner)

  async def __aenter__(self) -> "RecognitionSession":
    if self._runner is None:
      self.start()
    return self

  async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
    self.close()
    await self.wait_closed()

  def _cancel_runner(self) -> None:
    # Before its first step the runner notices the request itself; during teardown it must
    # not be interrupted
    if self._running and not self._tearing_down and self._runner and not self._runner.done():
      self._runner.cancel()

  def _transition(self, target: ConnectionState) -> bool:
    if self._state == target:
      return True
    if target not in _TRANSITIONS[self._state]:
      self._log.debug("Ignoring state change", state=self._state, target=target)
      return False

    self._log.debug("State change", previous=self._state, state=target)
    self._state = target
    return True

  def _emit(self, event: SessionEvent) -> None:
    self._events.put_nowait(event)

  def _fail(self, error: HarkError) -> None:
    self._failed = True
    self._log.warning("Session failed", error=str(error), kind=type(error).__name__)
    self._emit(Error(error))

  async def _run(self) -> None:
    self._running = True
    self._started_at = time.monotonic()
    try:
      if not self._close_requested and await self._open():
        await self._receive()
    except asyncio.CancelledError:
      if not self._close_requested:
        raise
      if task := asyncio.current_task():
        task.uncancel()
      self._log.debug("Session cancelled", state=self._state)
    except Exception as e:
      self._log.exception("Unexpected session failure")
      self._fail(HarkError(f"Unexpected session failure: {e}"))
    finally:
      await self._teardown()

  async def _open(self) -> bool:
    """Connect and send the start frame. Returns whether the session is up."""
    self._transition(ConnectionState.CONNECTING)
    try:
      await self._connection.connect()
    except SessionConnectionError as e:
      self._fail(e)
      return False
    self._emit(Connected())

    try:
      await self._connection.send_start(self._options)
    except SessionConnectionError as e:
      self._fail(e)
      return False

    self._log.info("Recognition started", content_type=self._options.content_type)
    self._pump = asyncio.create_task(self._pump_audio())
    return True

  async def _pump_audio(self) -> None:
    """Forward audio chunks in source order once the service listens, then send stop."""
    try:
      await self._listening.wait()
      while (chunk := await self._audio.read(self._chunk_size)) is not None:
        self._transition(ConnectionState.STREAMING)
        await self._connection.send_audio(chunk)
        self._bytes_sent += len(chunk)
      await self._send_stop()
    except SessionConnectionError as e:
      if not self._failed:
        self._fail(e)
      await self._connection.disconnect()
    except Exception as e:
      self._log.exception("Audio source failed")
      if not self._failed:
        self._fail(AudioSourceError(f"Audio source failed: {e}"))
      await self._connection.disconnect()

  async def _send_stop(self) -> None:
    if self._stop_sent:
      return
    self._stop_sent = True
    self._transition(ConnectionState.STOPPING)
    await self._connection.send_stop()
    self._log.info("End of audio", bytes_sent=Bytes(self._bytes_sent))

  async def _receive(self) -> None:
    """Consume frames from the service until the session is over."""
    try:
      async for message in self._connection.messages():
        match message:
          case StateMessage() if self._stop_sent:
            # Listening again after stop: every result is in
            self._complete_transcription()
            return
          case StateMessage():
            self._transition(ConnectionState.LISTENING)
            self._listening.set()
            self._emit(Listening())
          case SpeechRecognitionResults():
            self._emit(Transcription(message))
          case ErrorMessage() if message.is_inactivity_timeout:
            self._failed = True
            self._log.warning("Inactivity timeout", error=message.error)
            self._emit(InactivityTimeout(InactivityTimeoutError(message.error, message.code)))
            return
          case ErrorMessage():
            self._fail(RemoteError(message.error, message.code))
            return
          case ProtocolError():
            self._emit(Error(message))
    except SessionConnectionError as e:
      if not self._failed:
        self._fail(e)
      return

    if self._stop_sent and not self._failed:
      self._complete_transcription()

  def _complete_transcription(self) -> None:
    if self._complete:
      return
    self._complete = True
    self._emit(TranscriptionComplete())

  async def _teardown(self) -> None:
    self._tearing_down = True
    if self._pump is not None:
      self._pump.cancel()
      await asyncio.gather(self._pump, return_exceptions=True)

    await self._connection.disconnect()
    self._transition(ConnectionState.ERRORED if self._failed else ConnectionState.CLOSED)
    self._log.info(
      "Session ended",
      state=self._state,
      bytes_sent=Bytes(self._bytes_sent),
      duration=Seconds(time.monotonic() - self._started_at),
    )

    self._emit(Disconnected())
    if self._dispatcher is not None:
      await self._dispatcher

  async def _dispatch(self) -> None:
    """Deliver events to the callback, one at a time and in order, ending with the disconnect."""
    while True:
      event = await self._events.get()
      callback = self._callback
      if callback is None:
        return

      try:
        match event:
          case Connected():
            callback.on_connected()
          case Listening():
            callback.on_listening()
          case Transcription(results):
            if not self._close_requested:
              callback.on_transcription(results)
          case TranscriptionComplete():
            if not self._close_requested:
              callback.on_transcription_complete()
          case Error(error):
            callback.on_error(error)
          case InactivityTimeout(error):
            callback.on_inactivity_timeout(error)
          case Disconnected():
            callback.on_disconnected()
      except Exception:
        self._log.exception("Recognize callback raised", event=type(event).__name__)

      if isinstance(event, Disconnected):
        self._callback = None
        return
