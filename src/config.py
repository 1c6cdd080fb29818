"""Configuration loading for the Genius Hub MQTT bridge."""

import logging
import os
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import unquote, urlparse

import yaml
from pydantic import BaseModel, Field, field_validator


class HubConfig(BaseModel):
    """Genius Hub connection settings."""

    host: str = "localhost"
    port: int = 1223
    api_version: str = "v3"
    timeout: float = Field(default=10.0, gt=0)


class MqttConfig(BaseModel):
    """MQTT broker settings."""

    host: str = "localhost"
    port: int = 1883
    topic_prefix: str = "genius"
    client_id: str | None = None
    keepalive: int = 60
    reconnect_delay: float = Field(default=5.0, ge=0)
    publish_on_connect: bool = True


class PollingConfig(BaseModel):
    """Poll and override-refresh timing."""

    poll_interval: float = Field(default=5.0, gt=0)
    override_interval: float = Field(default=3 * 60 * 60.0, gt=0)
    override_duration: int = Field(default=23 * 60 * 60, gt=0)
    initial_fetch_attempts: int = Field(default=5, ge=1)


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value!r}")
        return level


class BridgeConfig(BaseModel):
    """Main configuration model."""

    hub: HubConfig = Field(default_factory=HubConfig)
    mqtt: MqttConfig = Field(default_factory=MqttConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class HubSecrets(BaseModel):
    token: str = ""


class MqttSecrets(BaseModel):
    username: str | None = None
    password: str | None = None


class SecretsConfig(BaseModel):
    """Secrets configuration model."""

    hub: HubSecrets = Field(default_factory=HubSecrets)
    mqtt: MqttSecrets = Field(default_factory=MqttSecrets)


def find_config_dir() -> Path:
    """Find the config directory.

    Looks for config directory in the following order:
    1. ./config (relative to cwd)
    2. ../config (parent of cwd)
    3. ~/.config/genius-mqtt
    """
    cwd = Path.cwd()

    if (cwd / "config").is_dir():
        return cwd / "config"

    if (cwd.parent / "config").is_dir():
        return cwd.parent / "config"

    home_config = Path.home() / ".config" / "genius-mqtt"
    if home_config.is_dir():
        return home_config

    return cwd / "config"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def apply_env_overrides(
    config: BridgeConfig,
    secrets: SecretsConfig,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Apply the GENIUSHUB_IP, GENIUSHUB_TOKEN and MQTT_URL variables.

    MQTT_URL has the form mqtt://[user[:password]@]host[:port].
    """
    env = os.environ if environ is None else environ

    if env.get("GENIUSHUB_IP"):
        config.hub.host = env["GENIUSHUB_IP"]
    if env.get("GENIUSHUB_TOKEN"):
        secrets.hub.token = env["GENIUSHUB_TOKEN"]

    mqtt_url = env.get("MQTT_URL")
    if mqtt_url:
        parsed = urlparse(mqtt_url)
        if not parsed.hostname:
            raise ValueError(f"MQTT_URL has no host: {mqtt_url!r}")
        config.mqtt.host = parsed.hostname
        if parsed.port:
            config.mqtt.port = parsed.port
        if parsed.username:
            secrets.mqtt.username = unquote(parsed.username)
        if parsed.password:
            secrets.mqtt.password = unquote(parsed.password)


def load_config(config_dir: Path | None = None) -> BridgeConfig:
    """Load the main configuration."""
    if config_dir is None:
        config_dir = find_config_dir()

    config_path = config_dir / "config.yaml"
    data = load_yaml(config_path)
    return BridgeConfig.model_validate(data)


def load_secrets(config_dir: Path | None = None) -> SecretsConfig:
    """Load the secrets configuration."""
    if config_dir is None:
        config_dir = find_config_dir()

    secrets_path = config_dir / "secrets.yaml"
    data = load_yaml(secrets_path)
    return SecretsConfig.model_validate(data)


def load_settings(
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[BridgeConfig, SecretsConfig]:
    """Load config and secrets, then apply environment overrides."""
    config = load_config(config_dir)
    secrets = load_secrets(config_dir)
    apply_env_overrides(config, secrets, environ)
    return config, secrets
