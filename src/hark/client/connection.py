"""
WebSocket connection and protocol handling for the streaming recognition channel.
"""

import base64
from collections.abc import AsyncIterator, Mapping
from urllib.parse import urlencode

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import (
  ConnectionClosed,
  ConnectionClosedError,
  InvalidHandshake,
  InvalidURI,
)

from hark.common import get_logger
from hark.errors import ProtocolError, SessionConnectionError
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

logger = get_logger("ws")

RECOGNIZE_PATH = "/v1/recognize"


def recognize_url(base_url: str, options: RecognizeOptions) -> str:
  """The streaming endpoint URL, carrying the options that select the model."""
  url = base_url.rstrip("/") + RECOGNIZE_PATH
  params = options.url_parameters()
  return f"{url}?{urlencode(params)}" if params else url


def basic_auth_header(user: str, password: str) -> str:
  token = base64.b64encode(f"{user}:{password}".encode()).decode("ascii")
  return f"Basic {token}"


class WebSocketConnection:
  """Owns one WebSocket to the recognition endpoint and speaks its frame protocol."""

  def __init__(
    self,
    url: str,
    headers: Mapping[str, str] | None = None,
    open_timeout: float | None = 10.0,
  ):
    self.url = url
    self.headers = dict(headers or {})
    self.open_timeout = open_timeout

    self.ws: ClientConnection | None = None

  async def connect(self) -> None:
    """Open the WebSocket.

    Raises:
        SessionConnectionError: The connection could not be established
    """
    try:
      self.ws = await connect(
        self.url,
        additional_headers=self.headers,
        open_timeout=self.open_timeout,
      )
    except (OSError, TimeoutError, InvalidHandshake, InvalidURI) as e:
      raise SessionConnectionError(f"Could not connect to {self.url}: {e}") from e

    logger.debug("Connected", url=self.url)

  async def disconnect(self) -> None:
    """Close the WebSocket. Safe to call when it is already closed."""
    if self.ws:
      ws, self.ws = self.ws, None
      await ws.close()
      logger.debug("Disconnected", code=ws.close_code, reason=ws.close_reason or None)

  def is_connected(self) -> bool:
    return self.ws is not None

  async def send_start(self, options: RecognizeOptions) -> None:
    await self._send(serialize_message(StartMessage.from_options(options)))

  async def send_stop(self) -> None:
    await self._send(serialize_message(StopMessage()))

  async def send_audio(self, chunk: bytes) -> None:
    """Send one chunk of audio as a single binary frame."""
    await self._send(chunk)

  async def _send(self, frame: str | bytes) -> None:
    if not self.ws:
      raise SessionConnectionError("Not connected")
    try:
      await self.ws.send(frame)
    except ConnectionClosed as e:
      raise SessionConnectionError(f"Connection lost while sending: {e}") from e

  async def messages(
    self,
  ) -> AsyncIterator[ErrorMessage | StateMessage | SpeechRecognitionResults | ProtocolError]:
    """Yield decoded frames from the service until the connection closes cleanly.

    A frame that cannot be decoded is yielded as a ProtocolError, and iteration goes on.

    Raises:
        SessionConnectionError: The connection closed abnormally
    """
    if not self.ws:
      return

    try:
      async for frame in self.ws:
        try:
          message = deserialize_message(frame)
        except ProtocolError as e:
          logger.warning("Undecodable frame", error=str(e))
          yield e
          continue
        yield message
    except ConnectionClosedError as e:
      raise SessionConnectionError(f"Connection lost: {e}") from e
