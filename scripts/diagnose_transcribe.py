import argparse
import os
import sys
import time

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from whisperclip.errors import WhisperClipError
from whisperclip.refiner import RefinementClient
from whisperclip.transcriber import transcribe_audio


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("audio_path", help="Path to audio file to transcribe.")
    parser.add_argument("--language", default="", help="Language code (e.g., en).")
    parser.add_argument("--refine", action="store_true", help="Also run clean-up.")
    parser.add_argument("--timeout", type=float, default=60.0, help="HTTP timeout.")
    args = parser.parse_args()

    credential = os.environ.get("OPENAI_API_KEY", "")

    started = time.time()
    try:
        text = transcribe_audio(
            args.audio_path,
            language=args.language,
            credential=credential,
            timeout=args.timeout,
        )
        print(f"Transcript: {text}")
        print(f"Transcription: {time.time() - started:.2f}s")
        if args.refine:
            refine_started = time.time()
            refined = RefinementClient(timeout=args.timeout).refine(
                text, args.language, credential
            )
            print(f"Refined: {refined}")
            print(f"Refinement: {time.time() - refine_started:.2f}s")
    except WhisperClipError as exc:
        print(f"{type(exc).__name__}: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
