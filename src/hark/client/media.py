"""
Audio media types understood by the service, and detection from file names.
"""

import os
from enum import StrEnum


class AudioMediaType(StrEnum):
  BASIC = "audio/basic"
  FLAC = "audio/flac"
  L16 = "audio/l16"
  MP3 = "audio/mp3"
  MPEG = "audio/mpeg"
  MULAW = "audio/mulaw"
  OGG = "audio/ogg"
  OGG_OPUS = "audio/ogg;codecs=opus"
  OGG_VORBIS = "audio/ogg;codecs=vorbis"
  WAV = "audio/wav"
  WEBM = "audio/webm"
  WEBM_OPUS = "audio/webm;codecs=opus"
  WEBM_VORBIS = "audio/webm;codecs=vorbis"


_EXTENSIONS: dict[str, AudioMediaType] = {
  ".au": AudioMediaType.BASIC,
  ".basic": AudioMediaType.BASIC,
  ".flac": AudioMediaType.FLAC,
  ".l16": AudioMediaType.L16,
  ".pcm": AudioMediaType.L16,
  ".raw": AudioMediaType.L16,
  ".mp3": AudioMediaType.MP3,
  ".mpeg": AudioMediaType.MPEG,
  ".mulaw": AudioMediaType.MULAW,
  ".oga": AudioMediaType.OGG,
  ".ogg": AudioMediaType.OGG,
  ".opus": AudioMediaType.OGG_OPUS,
  ".wav": AudioMediaType.WAV,
  ".webm": AudioMediaType.WEBM,
}


def get_media_type_from_file(path: str | os.PathLike[str] | None) -> str | None:
  """Return the audio media type for a file name's extension, or None when unknown."""
  if path is None:
    return None
  _, extension = os.path.splitext(os.fspath(path))
  media_type = _EXTENSIONS.get(extension.lower())
  return media_type.value if media_type else None


def is_valid_media_type(media_type: str | None) -> bool:
  """Whether a media type (parameters such as ``rate`` are ignored) is an accepted audio type."""
  if not media_type:
    return False
  base = media_type.split(";", 1)[0].strip().lower()
  return any(known.split(";", 1)[0] == base for known in AudioMediaType)
