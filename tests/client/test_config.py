"""Tests for the service configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from hark.client.config import (
  DEFAULT_URL,
  ServiceConfig,
  load_config_from_env,
  load_config_from_file,
)
from hark.errors import InvalidConfigurationError


@pytest.fixture
def fake_filesystem(fs):
  """Variable name 'fs' causes a pylint warning. Provide a longer name
  acceptable to pylint for use in tests.
  """
  yield fs


class TestServiceConfig:
  """Test ServiceConfig validation and functionality."""

  def test_defaults(self):
    config = ServiceConfig()

    assert config.url == DEFAULT_URL
    assert config.websocket_url == "wss://stream.watsonplatform.net/speech-to-text/api"
    assert config.credentials is None
    assert config.timeout == 30.0

  def test_websocket_url_from_http(self):
    config = ServiceConfig(url="http://localhost:8080/api/")

    assert config.url == "http://localhost:8080/api"
    assert config.websocket_url == "ws://localhost:8080/api"

  def test_explicit_websocket_url(self):
    config = ServiceConfig(url="https://a.example", websocket_url="wss://b.example/")
    assert config.websocket_url == "wss://b.example"

  def test_websocket_url_cannot_be_derived(self):
    with pytest.raises(ValueError, match="Cannot derive a WebSocket URL"):
      ServiceConfig(url="ftp://example.com")

  def test_api_key_credentials(self):
    assert ServiceConfig(api_key="secret").credentials == ("apikey", "secret")

  def test_username_password_credentials(self):
    assert ServiceConfig(username="u", password="p").credentials == ("u", "p")

  def test_api_key_and_username_mutual_exclusion(self):
    with pytest.raises(ValueError, match="Cannot specify both 'api_key' and 'username'"):
      ServiceConfig(api_key="secret", username="u", password="p")

  def test_username_requires_password(self):
    with pytest.raises(ValueError, match="must be given together"):
      ServiceConfig(username="u")

  def test_positive_timeout(self):
    with pytest.raises(ValidationError):
      ServiceConfig(timeout=0)

  def test_password_hidden_from_repr(self):
    assert "hunter2" not in repr(ServiceConfig(username="u", password="hunter2"))


class TestConfigLoading:
  """Test loading configuration from YAML files and the environment."""

  def test_load_valid_config(self, fake_filesystem):
    config_content = """
url: https://api.example.com/speech-to-text/api
api_key: secret
timeout: 5
headers:
  X-Watson-Learning-Opt-Out: "true"
"""
    fake_filesystem.create_file("/test/config.yaml", contents=config_content)

    config = load_config_from_file("/test/config.yaml")

    assert config.url == "https://api.example.com/speech-to-text/api"
    assert config.websocket_url == "wss://api.example.com/speech-to-text/api"
    assert config.credentials == ("apikey", "secret")
    assert config.timeout == 5.0
    assert config.headers == {"X-Watson-Learning-Opt-Out": "true"}

  def test_load_empty_config(self, fake_filesystem):
    fake_filesystem.create_file("/test/empty.yaml", contents="")
    assert load_config_from_file(Path("/test/empty.yaml")).url == DEFAULT_URL

  def test_load_missing_file(self, fake_filesystem):
    with pytest.raises(InvalidConfigurationError, match="Configuration file not found"):
      load_config_from_file("/test/missing.yaml")

  def test_load_invalid_yaml(self, fake_filesystem):
    fake_filesystem.create_file("/test/bad.yaml", contents="url: [unclosed")

    with pytest.raises(InvalidConfigurationError, match="Invalid YAML"):
      load_config_from_file("/test/bad.yaml")

  def test_load_non_mapping(self, fake_filesystem):
    fake_filesystem.create_file("/test/list.yaml", contents="- one\n- two\n")

    with pytest.raises(InvalidConfigurationError, match="must be a mapping"):
      load_config_from_file("/test/list.yaml")

  def test_load_invalid_settings(self, fake_filesystem):
    fake_filesystem.create_file("/test/invalid.yaml", contents="username: only-me\n")

    with pytest.raises(InvalidConfigurationError, match="Invalid configuration"):
      load_config_from_file("/test/invalid.yaml")

  def test_load_from_env(self):
    config = load_config_from_env(
      {
        "HARK_URL": "http://localhost:9000",
        "HARK_USERNAME": "user",
        "HARK_PASSWORD": "pass",
        "HARK_TIMEOUT": "2.5",
        "UNRELATED": "ignored",
      }
    )

    assert config.websocket_url == "ws://localhost:9000"
    assert config.credentials == ("user", "pass")
    assert config.timeout == 2.5

  def test_empty_env_values_are_ignored(self):
    config = load_config_from_env({"HARK_API_KEY": ""})
    assert config.credentials is None

  def test_invalid_env(self):
    with pytest.raises(InvalidConfigurationError, match="environment"):
      load_config_from_env({"HARK_TIMEOUT": "soon"})
