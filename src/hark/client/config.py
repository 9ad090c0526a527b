import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from hark.common import get_logger
from hark.errors import InvalidConfigurationError

logger = get_logger("cfg")

DEFAULT_URL = "https://stream.watsonplatform.net/speech-to-text/api"

# Environment variable -> ServiceConfig field
_ENV_FIELDS = {
  "HARK_URL": "url",
  "HARK_WEBSOCKET_URL": "websocket_url",
  "HARK_API_KEY": "api_key",
  "HARK_USERNAME": "username",
  "HARK_PASSWORD": "password",
  "HARK_TIMEOUT": "timeout",
}


class ServiceConfig(BaseModel):
  """Where the speech-to-text service lives and how to authenticate with it."""

  url: str = DEFAULT_URL
  """Base URL of the REST API, without a trailing slash."""

  websocket_url: str | None = None
  """Base URL of the streaming endpoint. Derived from ``url`` when not given."""

  api_key: str | None = None
  """API key, sent as basic auth with the user name ``apikey``."""

  username: str | None = None
  """Service credentials user name (mutually exclusive with api_key)."""

  password: str | None = Field(default=None, repr=False)
  """Service credentials password."""

  timeout: float = Field(default=30.0, gt=0.0)
  """Seconds to wait for a REST response or for the streaming connection to open."""

  headers: dict[str, str] = Field(default_factory=dict)
  """Extra headers sent with every request and with the WebSocket upgrade."""

  @model_validator(mode="after")
  def validate_credentials(self) -> "ServiceConfig":
    if self.api_key and (self.username or self.password):
      raise ValueError("Cannot specify both 'api_key' and 'username'/'password'")
    if bool(self.username) != bool(self.password):
      raise ValueError("'username' and 'password' must be given together")

    self.url = self.url.rstrip("/")
    if self.websocket_url is None:
      if self.url.startswith("https://"):
        self.websocket_url = "wss://" + self.url.removeprefix("https://")
      elif self.url.startswith("http://"):
        self.websocket_url = "ws://" + self.url.removeprefix("http://")
      else:
        raise ValueError(f"Cannot derive a WebSocket URL from {self.url!r}")
    self.websocket_url = self.websocket_url.rstrip("/")
    return self

  @property
  def credentials(self) -> tuple[str, str] | None:
    """Basic auth user and password, or None when no credentials are configured."""
    if self.api_key:
      return ("apikey", self.api_key)
    if self.username and self.password:
      return (self.username, self.password)
    return None


def load_config_from_file(config_path: str | Path) -> ServiceConfig:
  """Load a ServiceConfig from a YAML file.

  Raises:
      InvalidConfigurationError: The file is missing, not YAML, or holds invalid settings
  """
  path = Path(config_path)
  if not path.exists():
    raise InvalidConfigurationError(f"Configuration file not found: {path}")

  try:
    with path.open("r") as f:
      data = yaml.safe_load(f) or {}
  except yaml.YAMLError as e:
    raise InvalidConfigurationError(f"Invalid YAML in {path}: {e}") from e

  if not isinstance(data, dict):
    raise InvalidConfigurationError(f"Configuration in {path} must be a mapping")

  try:
    config = ServiceConfig.model_validate(data)
  except ValidationError as e:
    raise InvalidConfigurationError(f"Invalid configuration in {path}: {e}") from e

  logger.debug("Loaded configuration", path=str(path), url=config.url)
  return config


def load_config_from_env(environ: dict[str, str] | None = None) -> ServiceConfig:
  """Build a ServiceConfig from HARK_* environment variables, with defaults for the rest."""
  env = os.environ if environ is None else environ
  data = {field: env[name] for name, field in _ENV_FIELDS.items() if env.get(name)}

  try:
    return ServiceConfig.model_validate(data)
  except ValidationError as e:
    raise InvalidConfigurationError(f"Invalid configuration in environment: {e}") from e
