"""Bulk ingestion command line.

Usage:
    unified-mind-ingest --file transcript.json --entity ada --platform claude
    unified-mind-ingest --dir ./exports --entity ada --type document
"""

import argparse
import asyncio
import os
import sys
from collections.abc import Callable, Sequence

import logfire

from unified_mind.core.config import settings
from unified_mind.core.errors import InputValidationError
from unified_mind.core.logging import get_logger, setup_logging
from unified_mind.domain.models import MemoryType
from unified_mind.mcp.client import MemoryClient
from unified_mind.services.bulk_ingest import BulkIngestionDriver, IngestSink

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unified-mind-ingest",
        description="Bulk ingest transcripts and documents into Unified Mind",
    )
    parser.add_argument("--file", help="Single file to ingest")
    parser.add_argument("--dir", help="Directory to ingest recursively")
    parser.add_argument("--entity", help="Entity namespace the memories belong to")
    parser.add_argument(
        "--type",
        default=MemoryType.CONVERSATION.value,
        choices=[t.value for t in MemoryType],
        help="Memory type (default: conversation)",
    )
    parser.add_argument("--platform", default="file", help="Source platform (default: file)")
    parser.add_argument("--url", default=None, help="MCP endpoint (default: UNIFIED_MIND_URL)")
    return parser


async def run_ingest(args: argparse.Namespace, sink: IngestSink) -> int:
    driver = BulkIngestionDriver(
        sink,
        entity=args.entity,
        platform=args.platform,
        memory_type=args.type,
        profile=settings.coarse_chunking,
    )

    if args.file:
        try:
            report = await driver.ingest_file(args.file)
        except InputValidationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        if report.error:
            print(f"Error: could not read {report.path}: {report.error}", file=sys.stderr)
            return 1
        print(f"Ingested {report.succeeded} chunks from {report.path} ({report.failed} failed)")
        return 0

    report = await driver.ingest_directory(args.dir)
    print(
        f"Total chunks ingested: {report.total_succeeded} "
        f"from {len(report.files)} files ({report.total_failed} failed)"
    )
    return 0


async def _run_with_client(args: argparse.Namespace) -> int:
    async with MemoryClient(args.url or settings.unified_mind_url) as client:
        return await run_ingest(args, client)


def main(
    argv: Sequence[str] | None = None,
    sink_factory: Callable[[argparse.Namespace], IngestSink] | None = None,
) -> int:
    """Parse arguments and run; returns the process exit status."""
    args = build_parser().parse_args(argv)

    if not args.entity:
        print("Error: --entity is required", file=sys.stderr)
        return 1
    if not args.file and not args.dir:
        print("Error: either --file or --dir is required", file=sys.stderr)
        return 1

    logfire.configure(
        service_name=f"{settings.service_name}-ingest",
        token=os.getenv("LOGFIRE_TOKEN"),
        send_to_logfire="if-token-present",
        console=False,
    )
    setup_logging()

    if sink_factory is not None:
        return asyncio.run(run_ingest(args, sink_factory(args)))
    return asyncio.run(_run_with_client(args))


def entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
