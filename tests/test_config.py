import json
import os
import tempfile

import pytest

from whisperclip.config import (
    AppConfig,
    Settings,
    load_app_config,
    load_settings,
    resolve_app_config,
    save_app_config,
    save_settings,
)
from whisperclip.errors import ConfigError


def test_save_and_load_settings_roundtrip():
    settings = Settings(credential="sk-abc", language="cs", sample_rate="48000")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "state.json")
        save_settings(path, settings)
        loaded = load_settings(path)

    assert loaded == settings


def test_unset_fields_roundtrip_as_empty_strings(tmp_path):
    path = tmp_path / "state.json"
    save_settings(str(path), Settings(credential="sk-abc"))
    loaded = load_settings(str(path))

    assert loaded.credential == "sk-abc"
    assert loaded.language == ""
    assert loaded.sample_rate == ""


def test_settings_file_uses_user_keys(tmp_path):
    path = tmp_path / "state.json"
    save_settings(str(path), Settings(credential="k", language="en", sample_rate="44100"))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {"userInput": "k", "userLang": "en", "userRate": "44100"}


def test_missing_settings_file_gives_defaults(tmp_path):
    assert load_settings(str(tmp_path / "nope.json")) == Settings()


def test_partial_settings_file_defaults_missing_fields(tmp_path):
    path = tmp_path / "state.json"
    path.write_text('{"userLang": "en", "extra": 1}', encoding="utf-8")

    loaded = load_settings(str(path))
    assert loaded == Settings(credential="", language="en", sample_rate="")


def test_malformed_settings_file_raises_config_error(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(str(path))


def test_sample_rate_hz():
    assert Settings(sample_rate="48000").sample_rate_hz() == 48000
    assert Settings().sample_rate_hz() == 44100
    with pytest.raises(ConfigError):
        Settings(sample_rate="fast").sample_rate_hz()


def test_save_and_load_app_config_roundtrip(tmp_path):
    cfg = AppConfig(refine=False, timeout_seconds=5, device_name="USB")
    path = tmp_path / "whisperclip.yml"
    save_app_config(str(path), cfg)

    loaded = load_app_config(str(path))
    assert loaded.refine is False
    assert loaded.timeout_seconds == 5.0
    assert loaded.device_name == "USB"
    assert loaded.transcription_model == "whisper-1"


def test_resolve_app_config_defaults_when_absent(tmp_path):
    assert resolve_app_config(str(tmp_path)) == AppConfig()


def test_resolve_app_config_explicit_missing_path_raises(tmp_path):
    with pytest.raises(ConfigError):
        resolve_app_config(str(tmp_path), str(tmp_path / "missing.yml"))
