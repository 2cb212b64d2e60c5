"""
config.py - Load the streaming helper configuration.

Builds one immutable AppConfig from three layers, later layers winning:
    1. The packaged default streaming.yaml
    2. An optional user YAML file (--config)
    3. CLI overrides (--provider, --model)

Secrets are the process environment overlaid with a dotenv file. The process
environment itself is never modified.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import yaml
from dotenv import dotenv_values

_log = logging.getLogger("streaming.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "streaming.yaml"
DEFAULT_ENV_FILE = Path(".env")
COUNT_PLACEHOLDER = "%COUNT%"

# Chat calls per caption list never exceed this
MAX_ATTEMPTS_LIMIT = 5


class ConfigError(Exception):
    """Invalid or missing configuration."""
    pass


class TemplateNotFoundError(ConfigError):
    """Named prompt template does not exist in the prompt directory."""
    pass


@dataclass(frozen=True)
class SequenceDefinition:
    """One countdown phase as exposed on the command line."""
    name: str
    title: str
    template: str
    duration_seconds: int | None = None
    notify_live: bool | None = None


@dataclass(frozen=True)
class AppConfig:
    """Resolved configuration passed into the sequence runner."""
    provider: str | None
    model: str | None
    request_timeout: float
    max_attempts: int
    tick_seconds: float
    prompt_dir: Path
    notify_url: str | None
    notify_token_env: str
    notify_timeout: float
    sequences: Mapping[str, SequenceDefinition]
    secrets: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}), repr=False)

    @property
    def notify_token(self) -> str | None:
        return self.secrets.get(self.notify_token_env)

    def get_sequence(self, name: str) -> SequenceDefinition:
        try:
            return self.sequences[name]
        except KeyError:
            raise ConfigError(f"No sequence named '{name}' in config") from None


def _read_yaml(path: Path) -> dict:
    """Read a YAML mapping, raising ConfigError on any problem."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_secrets(env_file: Path | None = None) -> Mapping[str, str]:
    """
    Collect secrets from the process environment and a dotenv file.

    Values from the dotenv file win over the environment. When env_file is None
    the default .env is used if present; an explicitly named file must exist.

    Raises:
        ConfigError: If an explicitly requested env file is missing
    """
    secrets = dict(os.environ)

    if env_file is None:
        path = DEFAULT_ENV_FILE
        if not path.exists():
            return MappingProxyType(secrets)
    else:
        path = Path(env_file)
        if not path.exists():
            raise ConfigError(f"Env file not found: {path}")

    values = dotenv_values(path)
    loaded = {k: v for k, v in values.items() if v is not None}
    _log.debug("Loaded %d secrets from %s", len(loaded), path)
    secrets.update(loaded)
    return MappingProxyType(secrets)


def _parse_sequences(raw: dict) -> dict[str, SequenceDefinition]:
    sequences = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            raise ConfigError(f"Sequence '{name}' must be a mapping")
        if not entry.get("template"):
            raise ConfigError(f"Sequence '{name}' has no template")

        duration = entry.get("duration")
        if duration is not None and (not isinstance(duration, int) or duration <= 0):
            raise ConfigError(f"Sequence '{name}' duration must be a positive integer")

        notify_live = entry.get("notify_live")
        if notify_live is not None and not isinstance(notify_live, bool):
            raise ConfigError(f"Sequence '{name}' notify_live must be true or false")

        sequences[name] = SequenceDefinition(
            name=name,
            title=str(entry.get("title", name)),
            template=str(entry["template"]),
            duration_seconds=duration,
            notify_live=notify_live,
        )
    return sequences


def _positive_number(data: dict, key: str, kind=float):
    value = data.get(key)
    try:
        value = kind(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a number, got {data.get(key)!r}") from None
    if value <= 0:
        raise ConfigError(f"'{key}' must be greater than zero")
    return value


def load_config(
    config_path: Path | None = None,
    env_file: Path | None = None,
    overrides: dict | None = None,
) -> AppConfig:
    """
    Load and validate the application configuration.

    Args:
        config_path: Optional user YAML file merged over the packaged defaults
        env_file: Optional dotenv file with secrets (default: ./.env if present)
        overrides: Optional top-level keys (e.g. provider, model) applied last

    Returns:
        Frozen AppConfig

    Raises:
        ConfigError: If any layer is missing or invalid
    """
    data = _read_yaml(DEFAULT_CONFIG_PATH)
    prompt_base = DEFAULT_CONFIG_PATH.parent

    if config_path is not None:
        user_data = _read_yaml(Path(config_path))
        data = _merge(data, user_data)
        # Relative prompt_dir in a user file is relative to that file
        if "prompt_dir" in user_data:
            prompt_base = Path(config_path).parent

    if overrides:
        data = _merge(data, {k: v for k, v in overrides.items() if v is not None})

    prompt_dir = Path(data.get("prompt_dir", "prompts"))
    if not prompt_dir.is_absolute():
        prompt_dir = prompt_base / prompt_dir

    max_attempts = _positive_number(data, "max_attempts", int)
    if max_attempts > MAX_ATTEMPTS_LIMIT:
        raise ConfigError(
            f"'max_attempts' must be at most {MAX_ATTEMPTS_LIMIT}, got {max_attempts}"
        )

    notify = data.get("notify") or {}
    if not isinstance(notify, dict):
        raise ConfigError("'notify' must be a mapping")

    config = AppConfig(
        provider=data.get("provider"),
        model=data.get("model"),
        request_timeout=_positive_number(data, "request_timeout"),
        max_attempts=max_attempts,
        tick_seconds=_positive_number(data, "tick_seconds"),
        prompt_dir=prompt_dir,
        notify_url=notify.get("url"),
        notify_token_env=notify.get("token_env", "PERSONAL_PAGE_API_KEY"),
        notify_timeout=_positive_number(notify, "timeout") if "timeout" in notify else 10.0,
        sequences=MappingProxyType(_parse_sequences(data.get("sequences") or {})),
        secrets=load_secrets(env_file),
    )
    _log.debug(
        "Config loaded: provider=%s model=%s prompt_dir=%s",
        config.provider, config.model, config.prompt_dir,
    )
    return config


def load_template(config: AppConfig, template_name: str) -> str:
    """
    Read a prompt template from the configured prompt directory.

    Raises:
        TemplateNotFoundError: If the template file does not exist
    """
    path = config.prompt_dir / template_name
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise TemplateNotFoundError(f"Prompt template not found: {path}") from None


def render_template(template: str, count: int) -> str:
    """Substitute every %COUNT% placeholder with the minimum caption count."""
    return template.replace(COUNT_PLACEHOLDER, str(count))
