"""
Command-line interface for the exam extraction service.

Usage:
    python -m exam_extraction extract FILE [OPTIONS]
    python -m exam_extraction.cli extract FILE [OPTIONS]
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from exam_extraction.config import get_settings
from exam_extraction.errors import ExamExtractionError
from exam_extraction.services.exam_data_processor import process_exam_data_with_retry


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="exam-extraction",
        description="Exam Extraction CLI - Extract student results from exported file text"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract student results from a UTF-8 text, CSV or JSON file"
    )
    extract_parser.add_argument(
        "file",
        type=str,
        help="File containing the decoded exam results text"
    )
    extract_parser.add_argument(
        "--api-key",
        "-k",
        type=str,
        default=None,
        help="Gemini API key (default: GEMINI_API_KEY from env)"
    )
    extract_parser.add_argument(
        "--chunk-size",
        "-c",
        type=int,
        default=None,
        help="Maximum characters per model call (default: from env or 8000)"
    )
    extract_parser.add_argument(
        "--max-attempts",
        "-m",
        type=int,
        default=None,
        help="Attempts before giving up (default: from env or 3)"
    )
    extract_parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write the result JSON here instead of stdout"
    )

    return parser


async def extract_command(args: argparse.Namespace) -> int:
    """
    Execute the extract command.

    Args:
        args: Parsed command-line arguments

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    # Load settings
    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if not os.path.isfile(args.file):
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    if args.chunk_size is not None and args.chunk_size < 1:
        print("Error: --chunk-size must be at least 1", file=sys.stderr)
        return 1

    if args.max_attempts is not None and args.max_attempts < 1:
        print("Error: --max-attempts must be at least 1", file=sys.stderr)
        return 1

    if args.chunk_size is not None:
        settings = settings.model_copy(update={"chunk_size": args.chunk_size})

    try:
        with open(args.file, "r", encoding="utf-8") as f:
            content = f.read()
    except UnicodeDecodeError:
        print(f"Error: {args.file} is not a UTF-8 text file", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Could not read {args.file}: {e.strerror or e}", file=sys.stderr)
        return 1

    try:
        result = await process_exam_data_with_retry(
            os.path.basename(args.file),
            content,
            on_progress=lambda message: print(message, file=sys.stderr),
            max_attempts=args.max_attempts,
            api_key=args.api_key,
            settings=settings,
        )
    except ExamExtractionError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 1

    output = result.model_dump_json(indent=2)
    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(output)
        except OSError as e:
            print(f"Error: Could not write {args.output}: {e.strerror or e}", file=sys.stderr)
            return 1
        print(f"Wrote {len(result.students)} students to {args.output}", file=sys.stderr)
    else:
        print(output)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Route to command handler
    if args.command == "extract":
        return asyncio.run(extract_command(args))
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
