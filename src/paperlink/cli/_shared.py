"""Helpers shared by CLI commands."""

import json
from pathlib import Path

from paperlink.config import SimilarityConfig, load_similarity_config
from paperlink.corpus import load_documents, load_relationships, save_json
from paperlink.models import Document, Relationship


def add_collection_args(p) -> None:
    """Add --documents / --relationships / --output to a subcommand."""
    p.add_argument(
        "--documents",
        "-d",
        type=str,
        required=True,
        help="Path to documents JSONL file",
    )
    p.add_argument(
        "--relationships",
        "-r",
        type=str,
        default=None,
        help="Path to relationships JSONL file (optional)",
    )
    p.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write JSON results here instead of stdout",
    )


def load_collection(args) -> tuple[list[Document], list[Relationship]]:
    documents = load_documents(args.documents)
    relationships = load_relationships(args.relationships) if args.relationships else []
    return documents, relationships


def load_config(args) -> SimilarityConfig:
    return load_similarity_config(Path(args.config) if args.config else None)


def emit(data, output: str | None) -> None:
    """Print JSON to stdout, or write it atomically to ``output``."""
    if output:
        save_json(data, output)
    else:
        print(json.dumps(data, indent=2))
