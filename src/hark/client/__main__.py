"""
Command line interface for hark.

  hark models                       list the available base models
  hark transcribe FILE [options]    stream a recording and print the transcript
  hark listen [options]             stream the microphone until Ctrl-C
"""

import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from hark.client.audio import FileAudioSource, MicrophoneAudioSource
from hark.client.callback import RecognizeCallback
from hark.client.config import ServiceConfig, load_config_from_env, load_config_from_file
from hark.client.media import get_media_type_from_file
from hark.client.service import SpeechToText
from hark.common import get_logger, setup_logging_from_env
from hark.errors import HarkError, InactivityTimeoutError
from hark.wire import RecognizeOptions, SpeechRecognitionResults

logger = get_logger("cli")

console = Console()
err_console = Console(stderr=True)


class ConsoleCallback(RecognizeCallback):
  """Prints final transcripts as they arrive, and interim ones when asked to."""

  def __init__(self, show_interim: bool = False):
    self.show_interim = show_interim
    self.failed = False

  def on_listening(self) -> None:
    err_console.print("[dim]Listening...[/dim]")

  def on_transcription(self, results: SpeechRecognitionResults) -> None:
    for result in results.results:
      if result.final:
        console.print(result.transcript.strip())
      elif self.show_interim:
        err_console.print(f"[dim]{result.transcript.strip()}[/dim]")

  def on_transcription_complete(self) -> None:
    err_console.print("[green]Transcription complete[/green]")

  def on_error(self, error: Exception) -> None:
    self.failed = True
    err_console.print(f"[red]Error:[/red] {error}")

  def on_inactivity_timeout(self, error: InactivityTimeoutError) -> None:
    err_console.print(f"[yellow]Inactivity timeout:[/yellow] {error.message}")


def _options(args: argparse.Namespace, content_type: str) -> RecognizeOptions:
  return RecognizeOptions(
    content_type=content_type,
    model=args.model,
    interim_results=args.interim or None,
    timestamps=args.timestamps or None,
    speaker_labels=args.speaker_labels or None,
    inactivity_timeout=args.inactivity_timeout,
  )


def _device(value: str) -> int | str:
  """Input device index, or a substring of its name."""
  return int(value) if value.isdigit() else value


def _load_config(args: argparse.Namespace) -> ServiceConfig:
  if args.config:
    return load_config_from_file(args.config)
  return load_config_from_env()


async def _models(config: ServiceConfig) -> int:
  async with SpeechToText(config) as service:
    models = await service.list_models()

  table = Table("Name", "Language", "Rate", "Description")
  for model in sorted(models.models, key=lambda m: m.name):
    table.add_row(model.name, model.language, str(model.rate), model.description or "")
  console.print(table)
  return 0


async def _transcribe(config: ServiceConfig, args: argparse.Namespace) -> int:
  path = Path(args.file)
  content_type = args.content_type or get_media_type_from_file(path)
  if content_type is None:
    err_console.print(f"[red]Cannot tell the audio type of {path}; use --content-type[/red]")
    return 2

  callback = ConsoleCallback(show_interim=args.interim)
  audio = FileAudioSource(path, content_type=content_type)
  try:
    async with SpeechToText(config) as service:
      session = service.recognize_using_websocket(audio, _options(args, content_type), callback)
      await session.wait_closed()
  finally:
    audio.close()
  return 1 if callback.failed else 0


async def _listen(config: ServiceConfig, args: argparse.Namespace) -> int:
  callback = ConsoleCallback(show_interim=args.interim)
  microphone = MicrophoneAudioSource(device=args.device, sample_rate=args.rate)
  async with SpeechToText(config) as service:
    session = service.recognize_using_websocket(
      microphone, _options(args, microphone.content_type or ""), callback
    )
    microphone.start()
    try:
      await session.wait_closed()
    except asyncio.CancelledError:
      # Ctrl-C: end the audio and let the service finish what it has
      microphone.close()
      await session.wait_closed()
    finally:
      microphone.close()
  return 1 if callback.failed else 0


def _add_recognition_arguments(parser: argparse.ArgumentParser) -> None:
  parser.add_argument("--model", help="Base model to recognize with")
  parser.add_argument("--interim", action="store_true", help="Show interim results")
  parser.add_argument("--timestamps", action="store_true", help="Request word timestamps")
  parser.add_argument("--speaker-labels", action="store_true", help="Request speaker labels")
  parser.add_argument(
    "--inactivity-timeout",
    type=int,
    default=None,
    help="Seconds of silence after which the service ends the session",
  )


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(prog="hark", description="Speech-to-text from the terminal")
  parser.add_argument(
    "--config",
    help="YAML file with the service settings (default: HARK_* environment variables)",
  )
  commands = parser.add_subparsers(dest="command", required=True)

  commands.add_parser("models", help="List the available base models")

  transcribe = commands.add_parser("transcribe", help="Transcribe an audio file")
  transcribe.add_argument("file", help="Audio file to transcribe")
  transcribe.add_argument("--content-type", help="Audio media type, inferred from the file name")
  _add_recognition_arguments(transcribe)

  listen = commands.add_parser("listen", help="Transcribe the microphone until interrupted")
  listen.add_argument("--device", type=_device, default=None, help="Input device name or index")
  listen.add_argument("--rate", type=int, default=16000, help="Sample rate (default: 16000)")
  _add_recognition_arguments(listen)

  return parser


async def run(args: argparse.Namespace) -> int:
  config = _load_config(args)
  match args.command:
    case "models":
      return await _models(config)
    case "transcribe":
      return await _transcribe(config, args)
    case "listen":
      return await _listen(config, args)
  raise AssertionError(f"Unknown command {args.command}")


def main() -> None:
  setup_logging_from_env()
  args = build_parser().parse_args()

  try:
    sys.exit(asyncio.run(run(args)))
  except KeyboardInterrupt:
    sys.exit(130)
  except HarkError as e:
    logger.error("Command failed", command=args.command, error=str(e))
    err_console.print(f"[red]{e}[/red]")
    sys.exit(1)


if __name__ == "__main__":
  main()
