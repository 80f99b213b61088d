"""
Command-line interface for the Study Assistant pipeline.

Usage:
    python -m study_assistant sample notes.pdf
    python -m study_assistant analyze notes.pdf --university "UCT" --json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from study_assistant.exceptions import DocumentUnreadableError
from study_assistant.models.resources import UserProfile
from study_assistant.services.document_loader import MAX_PAGES_TO_ANALYZE, load_pages
from study_assistant.services.sampler import sample


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="study-assistant",
        description="Study Assistant CLI - sample and analyze study PDFs locally"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sample_parser = subparsers.add_parser(
        "sample",
        help="Print the excerpt that would be sent to Gemini"
    )
    sample_parser.add_argument("path", type=str, help="PDF file")
    sample_parser.add_argument(
        "--max-pages",
        "-m",
        type=int,
        default=MAX_PAGES_TO_ANALYZE,
        help="Leading pages to read (1-5, default: 5)"
    )

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a PDF with Gemini and print the result"
    )
    analyze_parser.add_argument("path", type=str, help="PDF file")
    analyze_parser.add_argument("--university", type=str, default=None)
    analyze_parser.add_argument("--course", type=str, default=None)
    analyze_parser.add_argument("--semester", type=str, default=None)
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )

    return parser


def _read_pdf(path: str) -> bytes:
    pdf_path = Path(path)
    if not pdf_path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return pdf_path.read_bytes()


def sample_command(args: argparse.Namespace) -> int:
    """Print the sampled excerpt for a PDF."""
    if args.max_pages < 1 or args.max_pages > MAX_PAGES_TO_ANALYZE:
        print(f"Error: --max-pages must be between 1 and {MAX_PAGES_TO_ANALYZE}")
        return 1

    try:
        pages = load_pages(_read_pdf(args.path), args.max_pages)
    except (FileNotFoundError, DocumentUnreadableError) as e:
        print(f"Error: {e}")
        return 1

    print(sample(pages))
    return 0


async def analyze_command(args: argparse.Namespace) -> int:
    """Run the full analysis for a PDF and print it."""
    from study_assistant.config import get_settings
    from study_assistant.services.analyzer import analyze_pdf
    from study_assistant.services.gemini_client import get_gemini_client

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("\nMake sure you have a .env file with:")
        print("  GEMINI_API_KEY=your_api_key")
        print("  SUPABASE_URL=https://your-project.supabase.co")
        print("  SUPABASE_KEY=your_anon_key")
        return 1

    profile = UserProfile(
        user_id="cli",
        university=args.university,
        course=args.course,
        semester=args.semester,
    )

    try:
        outcome = await analyze_pdf(
            get_gemini_client(),
            _read_pdf(args.path),
            profile,
            model=settings.model_name,
            max_pages=settings.max_pages_to_analyze,
            max_retries=settings.ai_max_retries,
        )
    except (FileNotFoundError, DocumentUnreadableError) as e:
        print(f"Error: {e}")
        return 1

    result = outcome.result
    if args.json:
        payload = result.model_dump(mode="json")
        payload["status"] = outcome.status
        if outcome.error:
            payload["error"] = outcome.error
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        if outcome.error:
            print(f"Warning: AI analysis failed ({outcome.status}): {outcome.error}")
        print(f"Subject: {result.subject.value}")
        print(f"Topics: {', '.join(result.topics)}")
        print("Summary:")
        for point in result.summary:
            print(f"  - {point}")
        print(f"Questions: {len(result.questions)}")
        for index, question in enumerate(result.questions, start=1):
            print(f"  {index}. [{question.difficulty.value}] {question.question}")
            for option in question.options:
                print(f"     {option}")
            print(f"     Answer: {question.correct_answer}")

    return 0 if outcome.error is None else 2


def main() -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "sample":
        return sample_command(args)
    elif args.command == "analyze":
        return asyncio.run(analyze_command(args))
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
