"""Feedback commands: biases."""

from paperlink.cli._shared import emit


def register(subparsers):
    """Register feedback commands."""
    p = subparsers.add_parser("biases", help="Confidence bias adjustments learned from feedback")
    p.add_argument("--feedback", "-f", type=str, required=True, help="Path to feedback JSONL file")
    p.add_argument("--collection", "-c", type=str, required=True, help="Collection id")
    p.add_argument(
        "--output", "-o", type=str, default=None, help="Write JSON here instead of stdout"
    )
    p.set_defaults(func=cmd_biases)


def cmd_biases(args):
    """Print bias adjustments for one collection."""
    from paperlink.corpus import load_feedback
    from paperlink.feedback import PreferenceCache

    cache = PreferenceCache(lambda cid: load_feedback(args.feedback, collection_id=cid))
    emit(cache.get(args.collection).to_dict(), args.output)
