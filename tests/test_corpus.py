"""Tests for loading collection snapshots and saving results."""

import json

import pytest

from paperlink.corpus import load_documents, load_feedback, load_relationships, save_json
from paperlink.models import InvalidDocumentError, Relationship


def _write_jsonl(path, rows):
    path.write_text("\n".join(json.dumps(row) for row in rows) + "\n")
    return path


class TestLoadDocuments:
    def test_keeps_order_and_defaults(self, tmp_path):
        path = _write_jsonl(
            tmp_path / "docs.jsonl",
            [
                {"id": "b", "title": "Second", "tags": ["x"], "year": 2020, "role": "method"},
                {"id": "a"},
            ],
        )
        docs = load_documents(path)
        assert [d.id for d in docs] == ["b", "a"]
        assert docs[0].role == "method"
        assert docs[1].tags == []
        assert docs[1].year is None
        assert docs[1].role == "other"

    def test_skips_blank_lines(self, tmp_path):
        path = tmp_path / "docs.jsonl"
        path.write_text('{"id": "a"}\n\n{"id": "b"}\n')
        assert len(load_documents(path)) == 2

    def test_unknown_role_rejected(self, tmp_path):
        path = _write_jsonl(tmp_path / "docs.jsonl", [{"id": "a", "role": "refutes"}])
        with pytest.raises(ValueError):
            load_documents(path)

    def test_string_year_rejected_on_load(self, tmp_path):
        path = _write_jsonl(tmp_path / "docs.jsonl", [{"id": "a", "year": "2020"}])
        with pytest.raises(InvalidDocumentError, match="2020"):
            load_documents(path)

    def test_string_tags_rejected_on_load(self, tmp_path):
        path = _write_jsonl(tmp_path / "docs.jsonl", [{"id": "a", "tags": "crispr"}])
        with pytest.raises(InvalidDocumentError, match="Tags"):
            load_documents(path)

    def test_null_year_and_tags_allowed(self, tmp_path):
        path = _write_jsonl(tmp_path / "docs.jsonl", [{"id": "a", "year": None, "tags": None}])
        doc = load_documents(path)[0]
        assert doc.year is None
        assert doc.tags == []


class TestLoadRelationships:
    def test_load(self, tmp_path):
        path = _write_jsonl(
            tmp_path / "rels.jsonl", [{"source_id": "a", "target_id": "b", "kind": "cites"}]
        )
        assert load_relationships(path) == [Relationship("a", "b")]


class TestLoadFeedback:
    def test_filter_by_collection(self, tmp_path):
        path = _write_jsonl(
            tmp_path / "feedback.jsonl",
            [
                {"kind": "gap", "collection_id": "one", "action": "accepted"},
                {"kind": "gap", "collection_id": "two", "action": "dismissed"},
            ],
        )
        assert len(load_feedback(path)) == 2
        records = load_feedback(path, collection_id="two")
        assert [r.action for r in records] == ["dismissed"]


class TestSaveJson:
    def test_creates_parent_dirs(self, tmp_path):
        path = tmp_path / "out" / "nested" / "result.json"
        save_json({"a": 1}, path)
        assert json.loads(path.read_text()) == {"a": 1}

    def test_overwrites_without_leftovers(self, tmp_path):
        path = tmp_path / "result.json"
        save_json([1], path)
        save_json([2], path)
        assert json.loads(path.read_text()) == [2]
        assert list(tmp_path.iterdir()) == [path]
