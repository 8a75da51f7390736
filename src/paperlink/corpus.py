"""Loading collection snapshots and saving results."""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path

from paperlink.feedback import FeedbackRecord
from paperlink.models import Document, Relationship


@contextmanager
def _atomic_write(path: Path):
    """Write to a temp file in the target directory, then rename into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            yield f
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise


def _read_jsonl(path: Path):
    with open(path) as f:
        for line in f:
            if line.strip():
                yield json.loads(line)


def load_documents(path: str | Path) -> list[Document]:
    """Load documents from a JSONL file, keeping file order.

    Each line: ``{"id", "title", "abstract", "tags", "year", "role",
    "citation_count"}``; everything but ``id`` is optional.
    """
    return [Document.from_dict(data) for data in _read_jsonl(Path(path))]


def load_relationships(path: str | Path) -> list[Relationship]:
    """Load explicit relationships from a JSONL file of ``{"source_id", "target_id"}``."""
    return [Relationship(data["source_id"], data["target_id"]) for data in _read_jsonl(Path(path))]


def load_feedback(path: str | Path, collection_id: str | None = None) -> list[FeedbackRecord]:
    """Load feedback records, optionally only those for one collection."""
    records = [FeedbackRecord.from_dict(data) for data in _read_jsonl(Path(path))]
    if collection_id is not None:
        records = [r for r in records if r.collection_id == collection_id]
    return records


def save_json(data, path: str | Path) -> None:
    """Atomically write ``data`` as indented JSON."""
    with _atomic_write(Path(path)) as f:
        json.dump(data, f, indent=2)
        f.write("\n")
