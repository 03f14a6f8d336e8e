"""
Command line entry point

Usage:
    recipe-inbox process-email message.eml
    cat message.eml | recipe-inbox process-email -
    recipe-inbox process-email message.eml --concurrent

Exit codes:
    0  every item succeeded (or the message had nothing to process)
    1  at least one item failed or was declined
    2  the message could not be parsed
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from recipe_inbox.core.config import get_settings
from recipe_inbox.core.logging_config import setup_logging
from recipe_inbox.domain.exceptions import MalformedEmailError
from recipe_inbox.domain.models import ProcessingSummary
from recipe_inbox.services.extraction_service import ExtractionService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ITEM_FAILED = 1
EXIT_MALFORMED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe-inbox",
        description="Extract recipes from emails, webpages and videos into Paprika"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser(
        "process-email",
        help="Run the full pipeline on a raw RFC 822 message"
    )
    process.add_argument(
        "path",
        type=str,
        help="Path to the raw message, or - to read stdin"
    )
    process.add_argument(
        "--concurrent",
        action="store_true",
        help="Process content items concurrently (overrides PROCESS_ITEMS_CONCURRENTLY)"
    )

    return parser


def read_message(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def format_summary(summary: ProcessingSummary) -> str:
    lines = [f"Processing complete: {summary.succeeded_count} succeeded, {summary.failed_count} failed"]
    for result in summary.succeeded:
        lines.append(f"  + {result.recipe_name} ({result.source})")
    for result in summary.failed:
        lines.append(f"  - {result.source}: {result.error}")
    return "\n".join(lines)


async def process_email(path: str, concurrent: bool, service: Optional[ExtractionService] = None) -> int:
    raw = read_message(path)

    service = service or ExtractionService.from_settings()
    if concurrent:
        service.process_concurrently = True

    try:
        summary = await service.process_email(raw)
    except MalformedEmailError as e:
        logger.error(f"Fatal error processing email: {e.message}")
        print(f"Malformed email: {e.message}", file=sys.stderr)
        return EXIT_MALFORMED

    print(format_summary(summary))
    return EXIT_ITEM_FAILED if summary.failed else EXIT_OK


def main(argv: Optional[List[str]] = None, service: Optional[ExtractionService] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    logger.debug(f"Running {args.command} with {get_settings().APP_NAME} {get_settings().APP_VERSION}")

    if args.command == "process-email":
        return asyncio.run(process_email(args.path, args.concurrent, service))

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
