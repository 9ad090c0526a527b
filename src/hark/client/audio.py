"""
Audio sources for streaming recognition.

A session pulls audio from an ``AudioSource`` in bounded chunks without knowing whether the
bytes come from a file, a pipe or a live microphone. Closing the source is the only
end-of-stream signal: an empty live buffer just means the reader waits.
"""

import asyncio
import io
import os
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, BinaryIO

import numpy as np

from hark.client.media import get_media_type_from_file
from hark.common import get_logger

if TYPE_CHECKING:
  import sounddevice as sd

logger = get_logger("audio")

# Microphone capture defaults, 16 kHz mono 16-bit PCM
SAMPLE_RATE = 16000
CHANNELS = 1
DTYPE = np.int16
BLOCKSIZE = 4096


class AudioSource(ABC):
  """A byte source read incrementally by exactly one session."""

  content_type: str | None = None
  """Media type of the audio, when the source knows it."""

  @abstractmethod
  async def read(self, max_bytes: int) -> bytes | None:
    """Return the next 1..max_bytes bytes, waiting for data if needed, or None at end of stream."""

  @abstractmethod
  def close(self) -> None:
    """Signal that no more audio will be produced. Safe to call more than once."""

  @property
  @abstractmethod
  def closed(self) -> bool: ...


def _wake(waiter: asyncio.Future[None]) -> None:
  if not waiter.done():
    waiter.set_result(None)


class AudioStream(AudioSource):
  """
  A live source fed with ``write()`` by a producer, possibly on another thread.

  Reads drain buffered bytes in order. When the buffer is empty a read waits until more audio
  is written or the stream is closed; once closed, buffered bytes are still delivered before
  the end of stream is reported.
  """

  def __init__(self, content_type: str | None = None):
    self.content_type = content_type
    self._lock = threading.Lock()
    self._buffer = bytearray()
    self._closed = False
    self._loop: asyncio.AbstractEventLoop | None = None
    self._waiter: asyncio.Future[None] | None = None

  def write(self, data: bytes) -> None:
    """Append audio. Raises ValueError once the stream is closed."""
    if not data:
      return
    with self._lock:
      if self._closed:
        raise ValueError("Cannot write to a closed audio stream")
      self._buffer += data
    self._notify()

  def close(self) -> None:
    with self._lock:
      if self._closed:
        return
      self._closed = True
    self._notify()

  @property
  def closed(self) -> bool:
    return self._closed

  def _notify(self) -> None:
    with self._lock:
      waiter, loop = self._waiter, self._loop
    if waiter is None or loop is None:
      return
    try:
      loop.call_soon_threadsafe(_wake, waiter)
    except RuntimeError:
      # The reader's loop is gone; there is nobody left to wake
      pass

  async def read(self, max_bytes: int) -> bytes | None:
    if max_bytes <= 0:
      raise ValueError(f"max_bytes must be positive, got {max_bytes}")

    while True:
      with self._lock:
        if self._buffer:
          chunk = bytes(self._buffer[:max_bytes])
          del self._buffer[:max_bytes]
          return chunk
        if self._closed:
          return None

        self._loop = asyncio.get_running_loop()
        waiter = self._waiter = self._loop.create_future()

      try:
        await waiter
      finally:
        with self._lock:
          if self._waiter is waiter:
            self._waiter = None


class FileAudioSource(AudioSource):
  """
  Audio read from a binary file object, a path, or an in-memory buffer.

  Reads run in a worker thread so a slow file or pipe never blocks the event loop. The end of
  the file is the end of the stream.
  """

  def __init__(
    self,
    source: BinaryIO | bytes | str | os.PathLike[str],
    content_type: str | None = None,
  ):
    self._owns_file = False
    match source:
      case bytes():
        self._file: BinaryIO = io.BytesIO(source)
      case str() | os.PathLike():
        self._file = open(source, "rb")  # noqa: SIM115
        self._owns_file = True
        content_type = content_type or get_media_type_from_file(source)
      case _:
        self._file = source
        name = getattr(source, "name", None)
        if content_type is None and isinstance(name, str):
          content_type = get_media_type_from_file(name)

    self.content_type = content_type
    self._closed = False

  @property
  def closed(self) -> bool:
    return self._closed

  async def read(self, max_bytes: int) -> bytes | None:
    if max_bytes <= 0:
      raise ValueError(f"max_bytes must be positive, got {max_bytes}")
    if self._closed:
      return None

    try:
      data = await asyncio.to_thread(self._file.read, max_bytes)
    except ValueError:
      # Closed underneath an in-flight read
      if self._closed:
        return None
      raise

    if not data:
      self.close()
      return None
    return data

  def close(self) -> None:
    if self._closed:
      return
    self._closed = True
    if self._owns_file:
      self._file.close()


class MicrophoneAudioSource(AudioStream):
  """Live 16-bit little-endian PCM captured from an input device with sounddevice."""

  def __init__(self, device: int | str | None = None, sample_rate: int = SAMPLE_RATE):
    super().__init__(content_type=f"audio/l16; rate={sample_rate}; endianness=little-endian")
    self.device = device
    self.sample_rate = sample_rate
    self._input: "sd.InputStream | None" = None

  def _audio_callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:
    """Sounddevice audio callback, runs on the audio thread."""
    if status:
      logger.warning("Audio input status", status=str(status))

    if self.closed:
      return
    try:
      self.write(indata.astype("<i2", copy=False).tobytes())
    except ValueError:
      # Lost the race with close()
      pass

  def start(self) -> "MicrophoneAudioSource":
    """Start capturing from the input device."""
    if self._input is not None:
      return self

    # PortAudio is loaded on import, so only load it when capture is requested
    import sounddevice as sd

    self._input = sd.InputStream(
      device=self.device,
      channels=CHANNELS,
      samplerate=self.sample_rate,
      dtype=DTYPE,
      latency="low",
      blocksize=BLOCKSIZE,
      callback=self._audio_callback,
    )
    self._input.start()
    logger.info("Microphone capture started", device=self.device, rate=self.sample_rate)
    return self

  def close(self) -> None:
    if self._input is not None:
      stream, self._input = self._input, None
      stream.stop()
      stream.close()
      logger.info("Microphone capture stopped")
    super().close()
