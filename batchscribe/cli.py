#!/usr/bin/env python3
"""
BatchScribe command-line runner

Queues the audio files of a local folder (searched recursively), transcribes
them one by one through the remote API, and writes the transcripts next to
each other in an output directory.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from batchscribe.core.config import get_settings
from batchscribe.core.exceptions import BatchScribeError
from batchscribe.core.models import AdmissionSource, FileEntry, FileStatus
from batchscribe.core.utils import format_file_size
from batchscribe.services.batch import BatchProcessor
from batchscribe.services.catalog import DEFAULT_MODELS
from batchscribe.services.intake import collect_folder
from batchscribe.services.storage import SessionStore, export_all, export_one, write_artifact

logger = logging.getLogger(__name__)


def print_models() -> None:
    """Print the default model catalog."""
    print("\nAvailable models:")
    print("-" * 60)
    for model in DEFAULT_MODELS:
        print(f"  {model.identifier:20} {model.display_name} ({model.provider})")
        print(f"  {'':20} speed: {model.speed}, accuracy: {model.accuracy}")
    print("-" * 60)


async def _print_progress(entry: FileEntry) -> None:
    if entry.status == FileStatus.processing:
        print(f"  [{entry.progress:3d}%] {entry.file_name} ...")
    elif entry.status == FileStatus.completed:
        print(f"  [done] {entry.file_name}")
    elif entry.status == FileStatus.error:
        print(f"  [fail] {entry.file_name}: {entry.error}")


async def transcribe_folder(
    folder: Path,
    output_dir: Path,
    model: str,
    api_key: str,
    base_url: str,
    combined: bool = True,
) -> int:
    """Run one batch over ``folder``. Returns the process exit code."""
    store = SessionStore()
    entries = store.admit(collect_folder(folder), source=AdmissionSource.folder)
    total = sum(e.file.size or 0 for e in entries)
    print(f"\nQueued {len(entries)} file(s), {format_file_size(total)}")

    processor = BatchProcessor(notify=_print_progress)
    summary = await processor.run(store, model, api_key, base_url)

    for result in store.results:
        write_artifact(export_one(result.file_name, result.transcription), output_dir)
    if combined and len(store.results):
        write_artifact(export_all(store.results), output_dir)

    print(f"\n{'='*60}")
    print(f"Completed {summary.completed}/{len(entries)}, failed {summary.failed}")
    print(f"Transcripts written to {output_dir}")
    print(f"{'='*60}\n")
    return 0 if summary.failed == 0 else 2


def main(argv: list[str] | None = None) -> int:
    """Entry point with CLI argument parsing."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Transcribe every audio file in a folder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("folder", type=Path, nargs="?", help="Folder to transcribe")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("transcriptions"),
        help="Output directory (default: ./transcriptions)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=settings.default_model,
        help=f"Model identifier (default: {settings.default_model})",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=settings.api_key,
        help="API key (default: API_KEY from environment / .env)",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=settings.base_url,
        help=f"API base URL (default: {settings.base_url})",
    )
    parser.add_argument(
        "--no-combined",
        action="store_true",
        help="Do not write all_transcriptions.txt",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available models and exit",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper())

    if args.list:
        print_models()
        return 0
    if args.folder is None:
        parser.error("folder is required")

    try:
        return asyncio.run(
            transcribe_folder(
                folder=args.folder,
                output_dir=args.output,
                model=args.model,
                api_key=args.api_key,
                base_url=args.base_url,
                combined=not args.no_combined,
            )
        )
    except NotADirectoryError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except BatchScribeError as exc:
        print(f"Error: {exc.detail}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
