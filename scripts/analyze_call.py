import asyncio
import mimetypes
import os
import sys

# Add project root to path so we can import callinsights
sys.path.append(os.getcwd())

from callinsights.config.settings import settings
from callinsights.pipelines.analysis import AnalysisPipeline
from callinsights.services import AudioUpload, CallAnalysisError, OpenAIClient


async def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/analyze_call.py path/to/call.mp3 [metric ...]")
        return

    file_path = sys.argv[1]
    custom_metrics = sys.argv[2:]

    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found. Please provide a path to an audio file.")
        return

    print(f"Reading {file_path}...")
    with open(file_path, "rb") as f:
        audio_bytes = f.read()

    content_type, _ = mimetypes.guess_type(file_path)
    upload = AudioUpload(
        audio_bytes=audio_bytes,
        filename=os.path.basename(file_path),
        content_type=content_type or "audio/mpeg",
    )

    client = OpenAIClient(
        api_key=settings.openai.api_key,
        base_url=settings.openai.base_url,
        timeout=settings.openai.timeout_seconds,
    )
    pipeline = AnalysisPipeline.from_config(client, settings.openai, settings.pipeline)

    print(f"Analyzing {len(audio_bytes)} bytes with metrics {custom_metrics or '(built-ins only)'}...")
    try:
        report = await pipeline.run_with_report(upload, custom_metrics)
    except CallAnalysisError as e:
        print(f"\nAnalysis Error: {e}")
        return
    finally:
        await client.aclose()

    print(f"\n--- Analysis ({report.source.value}) ---")
    print(report.analysis.model_dump_json(indent=2))
    print("-------------------------")


if __name__ == "__main__":
    asyncio.run(main())
