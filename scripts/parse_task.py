"""Parse a typed request or an audio file into a task and print it as JSON.

Usage:
    python scripts/parse_task.py "Review docs by next Friday, assign to Mike"
    python scripts/parse_task.py --audio recording.m4a
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import settings
from src.errors import TaskParserError
from src.monitoring.usage import UsageTracker
from src.orchestrator import build_orchestrator


async def run(text: str | None, audio_path: str | None) -> dict:
    tracker = UsageTracker()
    orchestrator = build_orchestrator(settings, usage_tracker=tracker)

    if audio_path:
        path = Path(audio_path)
        result = await orchestrator.extract_from_audio(path.read_bytes(), path.name)
        out = {
            "task": result.parsed_task.model_dump(mode="json", by_alias=True),
            "transcript": result.transcript,
        }
    else:
        task = await orchestrator.extract_from_text(text or "")
        out = {"task": task.model_dump(mode="json", by_alias=True)}

    out["tokens"] = tracker.snapshot().tokens
    return out


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("text", nargs="?", help="Natural-language task description")
    parser.add_argument("--audio", help="Path to an audio recording to transcribe first")
    args = parser.parse_args()

    if not args.text and not args.audio:
        parser.error("provide a task description or --audio")

    try:
        result = asyncio.run(run(args.text, args.audio))
    except TaskParserError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(json.dumps(result, indent=2, ensure_ascii=False))
