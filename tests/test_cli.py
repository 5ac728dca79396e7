from unittest.mock import patch

import pytest

from whisperclip import cli
from whisperclip.audio_utils import write_silence
from whisperclip.config import Settings, save_settings
from whisperclip.errors import NetworkError


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    config_dir = tmp_path / ".config" / "whisper"
    config_dir.mkdir(parents=True)
    save_settings(
        str(config_dir / "state.json"),
        Settings(credential="sk-test", language="en", sample_rate="48000"),
    )
    return tmp_path


def test_settings_command_hides_key(home, capsys):
    assert cli.main(["settings"]) == 0

    out = capsys.readouterr().out
    assert "API key: set" in out
    assert "sk-test" not in out
    assert "Sample rate: 48000" in out


def test_transcribe_command_prints_text(home, capsys):
    audio = home / "clip.wav"
    write_silence(str(audio), 0.2)

    with patch.object(cli, "TranscriptionClient") as client_cls:
        client_cls.return_value.transcribe.return_value = "hello world"
        assert cli.main(["transcribe", str(audio)]) == 0

    client_cls.return_value.transcribe.assert_called_once_with(
        str(audio), "en", "sk-test"
    )
    assert capsys.readouterr().out.strip() == "hello world"


def test_transcribe_command_reports_errors(home, capsys):
    audio = home / "clip.wav"
    write_silence(str(audio), 0.2)

    with patch.object(cli, "TranscriptionClient") as client_cls:
        client_cls.return_value.transcribe.side_effect = NetworkError("offline")
        assert cli.main(["transcribe", str(audio)]) == 1

    assert "offline" in capsys.readouterr().err


def test_init_config_writes_defaults_once(home, capsys):
    target = home / ".config" / "whisper" / "whisperclip.yml"

    assert cli.main(["init-config"]) == 0
    assert target.exists()
    assert cli.main(["init-config"]) == 1
    assert "already exists" in capsys.readouterr().out


def test_record_with_zero_seconds_does_not_wait_for_enter(home, capsys, monkeypatch):
    def _no_prompt(*_args):
        raise AssertionError("record --seconds 0 must not prompt")

    monkeypatch.setattr("builtins.input", _no_prompt)
    with patch.object(cli, "SessionController") as controller_cls:
        controller = controller_cls.return_value
        controller.stop.return_value.final_text = "done"
        assert cli.main(["record", "--seconds", "0", "--no-copy"]) == 0

    controller.start.assert_called_once_with()
    controller.stop.assert_called_once_with()
    assert "done" in capsys.readouterr().out
