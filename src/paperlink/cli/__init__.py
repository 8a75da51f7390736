"""Command-line interface for paperlink."""

import argparse
import logging
import sys

from dotenv import load_dotenv

# Load .env file from project root
load_dotenv()


def main():
    """Main CLI entry point."""
    from paperlink.cli import feedback, similarity
    from paperlink.config import ConfigurationError
    from paperlink.models import InvalidDocumentError
    from paperlink.similarity.relations import CollectionIntegrityError

    modules = [similarity, feedback]

    from paperlink import __version__

    parser = argparse.ArgumentParser(
        prog="paperlink",
        description="Paper similarity, phantom edges, and cluster suggestions",
    )
    parser.add_argument("--version", action="version", version=f"paperlink {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config JSON (default: ~/.paperlink/config.json)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for mod in modules:
        mod.register(subparsers)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except (ConfigurationError, CollectionIntegrityError, InvalidDocumentError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
