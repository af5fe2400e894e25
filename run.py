"""
Entry point: research a topic across sources, analyze it, print a dashboard.

Usage::

    python run.py "noise cancelling headphones"
    python run.py "noise cancelling headphones" --sources youtube reddit
    python run.py "trail shoes" --guidelines "Playful, no jargon" --backend memory

Exit codes: 0 on success, 1 when the pipeline fails, 2 on bad configuration
or input.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from artfinder.config import BACKENDS, Settings, validate_env
from artfinder.dashboard import render_dashboard
from artfinder.exceptions import ArtFinderError, ConfigurationError, ValidationError
from artfinder.logging import init_logger
from artfinder.models import SearchRequest, Source
from artfinder.pipeline import create_pipeline

logger = logging.getLogger("run")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Collect research on a topic and generate a marketing analysis"
    )
    parser.add_argument("topic", help="Research topic")
    parser.add_argument(
        "--sources",
        nargs="+",
        choices=[s.value for s in Source],
        default=[s.value for s in Source],
        help="Data sources to query (default: all)",
    )
    parser.add_argument(
        "--guidelines",
        default="",
        help="Brand guidelines to consider in the analysis",
    )
    parser.add_argument(
        "--backend",
        choices=list(BACKENDS),
        help="Persistence backend (overrides config/env)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        type=Path,
        help="Settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=5,
        help="Entries per dashboard section (default 5)",
    )
    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_yaml(args.config)
        if args.backend:
            settings.persistence_backend = args.backend
        request = SearchRequest(
            topic=args.topic,
            sources=args.sources,
            brand_guidelines=args.guidelines,
        )
    except (ConfigurationError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    init_logger(log_dir=settings.log_dir, echo=False)

    # Credentials can also come from the settings file
    status = validate_env(settings.persistence_backend, strict=False)
    missing = [name for name, present in status.items() if not present]
    if missing:
        logger.debug("Environment variables not set: %s", ", ".join(missing))

    try:
        pipeline = await create_pipeline(settings, request)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        report = await pipeline.run(request)
    except ArtFinderError as exc:
        logger.error("Pipeline failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(render_dashboard(report, top_n=args.top))
    return 0


if __name__ == "__main__":
    load_dotenv()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(0)
