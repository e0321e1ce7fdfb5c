import asyncio
import os
import sys

# Add project root to path so we can import eco_moderation
sys.path.append(os.getcwd())

from eco_moderation.pipelines.moderation.classification import (
    ClassificationError,
    classify_transcript,
)
from eco_moderation.services.transcribe import TranscriptionError, get_transcribe_service


async def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/moderate_file.py path/to/audio.mp3")
        return

    file_path = sys.argv[1]
    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found.")
        return

    with open(file_path, "rb") as f:
        audio_bytes = f.read()

    print(f"Transcribing {len(audio_bytes)} bytes using Amazon Transcribe Streaming...")
    try:
        result = await get_transcribe_service().transcribe_audio(audio_bytes)
    except TranscriptionError as e:
        print(f"\nTranscription Error: {e}")
        return

    print("\n--- Transcript ---")
    print(result.transcript)

    # Dry run: nothing is written and no email is sent.
    try:
        verdict = await classify_transcript(result.transcript)
    except ClassificationError as e:
        print(f"\nClassification Error: {e}")
        return

    print("\n--- Verdict ---")
    print(verdict.model_dump_json(indent=2))


if __name__ == "__main__":
    asyncio.run(main())
