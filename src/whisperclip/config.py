"""Configuration handling.

Two files live in the per-user config directory:

* ``state.json`` holds the three values the user edits in the Settings tab
  (API key, language, sample rate). It is read once at startup and written
  once at shutdown.
* ``whisperclip.yml`` is optional and holds everything else: endpoints,
  model names, timeouts and where recordings and logs go.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Optional

import yaml

from .errors import ConfigError

LANGUAGES = ("cs", "en")
SAMPLE_RATES = ("44100", "48000")
DEFAULT_SAMPLE_RATE_HZ = 44100

SETTINGS_FILENAME = "state.json"
APP_CONFIG_FILENAME = "whisperclip.yml"


@dataclass
class Settings:
    credential: str = ""
    language: str = ""
    sample_rate: str = ""

    def sample_rate_hz(self) -> int:
        if not self.sample_rate:
            return DEFAULT_SAMPLE_RATE_HZ
        try:
            return int(self.sample_rate)
        except ValueError as exc:
            raise ConfigError(f"Invalid sample rate: {self.sample_rate!r}") from exc


@dataclass
class AppConfig:
    transcription_url: str = "https://api.openai.com/v1/audio/transcriptions"
    transcription_model: str = "whisper-1"
    refinement_url: str = "https://api.openai.com/v1/chat/completions"
    refinement_model: str = "gpt-3.5-turbo"
    refine: bool = True
    timeout_seconds: float = 60.0
    recordings_dir: str = ""
    keep_recordings_hours: int = 48
    log_dir: str = ""
    device_name: Optional[str] = None
    block_size: int = 1024
    debug_logging: bool = False


def default_config_dir() -> str:
    home = os.path.expanduser("~")
    if not home or home == "~":
        raise ConfigError("Cannot determine the home directory.")
    return os.path.join(home, ".config", "whisper")


def ensure_config_dir(path: Optional[str] = None) -> str:
    config_dir = path or default_config_dir()
    try:
        os.makedirs(config_dir, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Cannot create config directory {config_dir}: {exc}") from exc
    return config_dir


def load_settings(path: str) -> Settings:
    """Read the settings file; a missing file gives empty defaults."""
    if not os.path.exists(path):
        return Settings()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read settings from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} does not hold a JSON object")

    return Settings(
        credential=_as_str(data.get("userInput")),
        language=_as_str(data.get("userLang")),
        sample_rate=_as_str(data.get("userRate")),
    )


def save_settings(path: str, settings: Settings) -> None:
    data = {
        "userInput": settings.credential,
        "userLang": settings.language,
        "userRate": settings.sample_rate,
    }
    try:
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False)
            handle.write("\n")
    except OSError as exc:
        raise ConfigError(f"Cannot write settings to {path}: {exc}") from exc


def _as_str(value) -> str:
    if value is None:
        return ""
    return str(value)


def load_app_config(path: str) -> AppConfig:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read config from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} does not hold a mapping")

    defaults = AppConfig()
    try:
        return _app_config_from(data, defaults)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value in {path}: {exc}") from exc


def _app_config_from(data: dict, defaults: AppConfig) -> AppConfig:
    return AppConfig(
        transcription_url=data.get("transcription_url", defaults.transcription_url),
        transcription_model=data.get(
            "transcription_model", defaults.transcription_model
        ),
        refinement_url=data.get("refinement_url", defaults.refinement_url),
        refinement_model=data.get("refinement_model", defaults.refinement_model),
        refine=bool(data.get("refine", defaults.refine)),
        timeout_seconds=float(data.get("timeout_seconds", defaults.timeout_seconds)),
        recordings_dir=data.get("recordings_dir", "") or "",
        keep_recordings_hours=int(
            data.get("keep_recordings_hours", defaults.keep_recordings_hours)
        ),
        log_dir=data.get("log_dir", "") or "",
        device_name=data.get("device_name"),
        block_size=int(data.get("block_size", defaults.block_size)),
        debug_logging=bool(data.get("debug_logging", False)),
    )


def save_app_config(path: str, config: AppConfig) -> None:
    data = {
        "transcription_url": config.transcription_url,
        "transcription_model": config.transcription_model,
        "refinement_url": config.refinement_url,
        "refinement_model": config.refinement_model,
        "refine": config.refine,
        "timeout_seconds": config.timeout_seconds,
        "recordings_dir": config.recordings_dir,
        "keep_recordings_hours": config.keep_recordings_hours,
        "log_dir": config.log_dir,
        "device_name": config.device_name,
        "block_size": config.block_size,
        "debug_logging": config.debug_logging,
    }
    try:
        with open(path, "w", encoding="utf-8") as handle:
            yaml.safe_dump(data, handle, sort_keys=False)
    except OSError as exc:
        raise ConfigError(f"Cannot write config to {path}: {exc}") from exc


def resolve_app_config(config_dir: str, path: Optional[str] = None) -> AppConfig:
    """Load the YAML config if present, otherwise return defaults."""
    config_path = path or os.path.join(config_dir, APP_CONFIG_FILENAME)
    if os.path.exists(config_path):
        return load_app_config(config_path)
    if path:
        raise ConfigError(f"Config file not found: {path}")
    return AppConfig()
