"""Tutor cache operator CLI."""

import argparse
import json
import logging
import sys

from tutor_cache.api.dependencies import create_stores
from tutor_cache.config import configure_logging, settings
from tutor_cache.errors import CacheStoreError, CleanupError
from tutor_cache.services import CleanupService

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="tutor-cache",
        description="Tutor cache maintenance commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Remove expired cache entries now
  tutor-cache cleanup

  # Print per-family cache statistics
  tutor-cache stats
""",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: {settings.log_level})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("cleanup", help="Delete expired cache entries of every family")
    subparsers.add_parser("stats", help="Print cache store statistics as JSON")
    return parser


def run_cleanup() -> int:
    repository, _ = create_stores(settings)
    try:
        result = CleanupService(repository).run_cleanup()
    except CleanupError as e:
        print(f"Cleanup failed: {e}", file=sys.stderr)
        return 1

    print(f"Removed {result.deleted_count} expired cache entries at {result.ran_at.isoformat()}")
    return 0


def run_stats() -> int:
    repository, _ = create_stores(settings)
    try:
        stats = repository.get_stats()
    except CacheStoreError as e:
        print(f"Failed to read cache stats: {e}", file=sys.stderr)
        return 1

    print(json.dumps(stats, indent=2))
    return 0


COMMANDS = {
    "cleanup": run_cleanup,
    "stats": run_stats,
}


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return COMMANDS[args.command]()


if __name__ == "__main__":
    sys.exit(main())
