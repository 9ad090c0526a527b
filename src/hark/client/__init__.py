"""
hark client library.

REST and streaming access to the speech-to-text service.
"""

from hark.client.audio import AudioSource, AudioStream, FileAudioSource, MicrophoneAudioSource
from hark.client.callback import RecognizeCallback
from hark.client.config import ServiceConfig, load_config_from_env, load_config_from_file
from hark.client.connection import WebSocketConnection
from hark.client.service import SpeechToText
from hark.client.session import ConnectionState, RecognitionSession

__all__ = [
  "AudioSource",
  "AudioStream",
  "ConnectionState",
  "FileAudioSource",
  "MicrophoneAudioSource",
  "RecognitionSession",
  "RecognizeCallback",
  "ServiceConfig",
  "SpeechToText",
  "WebSocketConnection",
  "load_config_from_env",
  "load_config_from_file",
]
