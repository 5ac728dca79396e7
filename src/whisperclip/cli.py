"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

from .audio_utils import describe_wav
from .clipboard import copy_to_clipboard
from .config import (
    APP_CONFIG_FILENAME,
    AppConfig,
    SETTINGS_FILENAME,
    ensure_config_dir,
    load_settings,
    resolve_app_config,
    save_app_config,
)
from .controller import SessionController
from .errors import WhisperClipError
from .logging_utils import add_console_handler, setup_logging
from .recorder import list_input_devices
from .refiner import RefinementClient
from .transcriber import TranscriptionClient


def _print_error(exc: WhisperClipError) -> None:
    print(f"Error: {exc}", file=sys.stderr)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="whisperclip")
    parser.add_argument("--config", help="Path to whisperclip.yml.")
    parser.add_argument("--verbose", action="store_true", help="Log to stderr.")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("gui")

    devices_cmd = sub.add_parser("devices")
    devices_cmd.add_argument("--match", help="Filter device names by substring.")

    record_cmd = sub.add_parser("record")
    record_cmd.add_argument(
        "--seconds", type=float, help="Stop after this many seconds. Omit for Enter."
    )
    record_cmd.add_argument(
        "--no-refine", action="store_true", help="Skip the clean-up pass."
    )
    record_cmd.add_argument(
        "--no-copy", action="store_true", help="Do not touch the clipboard."
    )

    transcribe_cmd = sub.add_parser("transcribe")
    transcribe_cmd.add_argument("audio_path", help="Path to WAV file.")
    transcribe_cmd.add_argument("--language", help="Override language code.")
    transcribe_cmd.add_argument("--refine", action="store_true", help="Refine too.")
    transcribe_cmd.add_argument("--copy", action="store_true", help="Copy result.")

    sub.add_parser("settings")
    sub.add_parser("init-config")

    args = parser.parse_args(argv)
    command = args.command or "gui"

    try:
        if command == "gui":
            from .gui import launch_gui

            launch_gui(config_path=args.config)
            return 0

        if command == "devices":
            devices = list_input_devices()
            if args.match:
                devices = [
                    d for d in devices if args.match.lower() in d.get("name", "").lower()
                ]
            for device in devices:
                name = device.get("name", "Unknown")
                index = device.get("index", "?")
                channels = device.get("max_input_channels", 0)
                rate = device.get("default_samplerate")
                line = f"[{index}] {name} (inputs: {channels})"
                if rate:
                    line = f"{line} [rate={rate}]"
                print(line)
            return 0

        config_dir = ensure_config_dir()
        if command == "init-config":
            path = args.config or os.path.join(config_dir, APP_CONFIG_FILENAME)
            if os.path.exists(path):
                print(f"Config already exists: {path}")
                return 1
            save_app_config(path, AppConfig())
            print(f"Wrote {path}")
            return 0

        config = resolve_app_config(config_dir, args.config)
        logger, log_path = setup_logging(
            log_dir=config.log_dir or os.path.join(config_dir, "logs"),
            level=logging.DEBUG if config.debug_logging else logging.INFO,
        )
        if args.verbose:
            add_console_handler(logger)
        settings = load_settings(os.path.join(config_dir, SETTINGS_FILENAME))

        if command == "settings":
            masked = "set" if settings.credential else "not set"
            print(f"API key: {masked}")
            print(f"Language: {settings.language or '(auto)'}")
            print(f"Sample rate: {settings.sample_rate or '(default)'}")
            print(f"Recordings: {config.recordings_dir or '(temp)'}")
            print(f"Log: {log_path}")
            return 0

        if command == "record":
            if args.no_refine:
                config.refine = False
            controller = SessionController(
                settings=settings,
                config=config,
                clipboard=(lambda _text: None) if args.no_copy else copy_to_clipboard,
                on_error=_print_error,
            )
            if controller.start() is None:
                return 1
            if args.seconds is not None:
                print(f"Recording for {args.seconds:g}s...")
                time.sleep(max(args.seconds, 0.0))
            else:
                input("Recording... press Enter to stop.")
            result = controller.stop()
            if result is None:
                return 1
            print(result.final_text)
            return 0

        if command == "transcribe":
            info = describe_wav(args.audio_path)
            logger.info(
                "Transcribing %s (%.1fs, %s Hz, %s ch)",
                args.audio_path,
                info.duration_seconds,
                info.sample_rate_hz,
                info.channels,
            )
            language = args.language or settings.language
            client = TranscriptionClient(
                url=config.transcription_url,
                model=config.transcription_model,
                timeout=config.timeout_seconds,
            )
            text = client.transcribe(args.audio_path, language, settings.credential)
            if args.refine:
                refiner = RefinementClient(
                    url=config.refinement_url,
                    model=config.refinement_model,
                    timeout=config.timeout_seconds,
                )
                text = refiner.refine(text, language, settings.credential)
            if args.copy:
                copy_to_clipboard(text)
            print(text)
            return 0
    except WhisperClipError as exc:
        _print_error(exc)
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
