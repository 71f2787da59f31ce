import asyncio
import os
import sys

# Add project root to path so we can import app
sys.path.append(os.getcwd())

from app.config.settings import settings
from app.pipelines.feedback import audio_extension
from app.services.classifier import ClassificationError, FeedbackClassifier
from app.services.transcribe import TranscriptionError, build_transcriber

_CONTENT_TYPES = {
    ".webm": "audio/webm",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".ogg": "audio/ogg",
}


async def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python scripts/transcribe_file.py path/to/audio.webm")
        return 2

    file_path = sys.argv[1]
    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found.")
        return 1

    with open(file_path, "rb") as f:
        audio_bytes = f.read()

    extension = audio_extension(file_path, None)
    transcriber = build_transcriber(settings)
    classifier = FeedbackClassifier.from_config(settings.openai)

    print(f"Transcribing {len(audio_bytes)} bytes using {transcriber.name}...")
    try:
        transcript = await transcriber.transcribe(
            audio_bytes,
            filename=os.path.basename(file_path),
            content_type=_CONTENT_TYPES[extension],
        )
        print("\n--- Transcript ---")
        print(transcript)

        classification = await classifier.classify(transcript)
    except (TranscriptionError, ClassificationError) as e:
        print(f"\nError: {e}")
        return 1

    print("\n--- Classification ---")
    print(classification.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
