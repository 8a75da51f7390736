"""Similarity commands: similar, matrix, phantoms, clusters, quality."""

from pathlib import Path

from paperlink.cli._shared import add_collection_args, emit, load_collection, load_config


def register(subparsers):
    """Register similarity commands."""
    _register_similar(subparsers)
    _register_matrix(subparsers)
    _register_phantoms(subparsers)
    _register_clusters(subparsers)
    _register_quality(subparsers)


def _register_similar(subparsers):
    p = subparsers.add_parser("similar", help="Most similar documents to one document")
    p.add_argument("doc_id", type=str, help="Id of the target document")
    add_collection_args(p)
    p.add_argument("--top-k", "-k", type=int, default=None, help="Number of results")
    p.add_argument(
        "--min-similarity", type=float, default=None, help="Minimum composite score (default: 0.2)"
    )
    p.set_defaults(func=cmd_similar)


def _register_matrix(subparsers):
    p = subparsers.add_parser("matrix", help="Score every pair in the collection")
    add_collection_args(p)
    p.add_argument(
        "--min-similarity",
        type=float,
        default=0.0,
        help="Leave out pairs below this score in the output",
    )
    p.set_defaults(func=cmd_matrix)


def _register_phantoms(subparsers):
    p = subparsers.add_parser("phantoms", help="Infer phantom edges between unlinked documents")
    add_collection_args(p)
    p.add_argument(
        "--min-similarity", type=float, default=None, help="Minimum composite score (default: 0.3)"
    )
    p.add_argument(
        "--max-per-document",
        type=int,
        default=None,
        help="Maximum phantom edges per document (default: 3)",
    )
    p.set_defaults(func=cmd_phantoms)


def _register_clusters(subparsers):
    p = subparsers.add_parser("clusters", help="Suggest document clusters")
    add_collection_args(p)
    p.add_argument(
        "--min-similarity", type=float, default=None, help="Merge threshold (default: 0.4)"
    )
    p.add_argument("--min-size", type=int, default=None, help="Minimum cluster size (default: 2)")
    p.add_argument(
        "--auto", action="store_true", help="Describe clusters (names, representatives, stats)"
    )
    p.add_argument(
        "--max-clusters", type=int, default=10, help="Maximum described clusters (with --auto)"
    )
    p.set_defaults(func=cmd_clusters)


def _register_quality(subparsers):
    p = subparsers.add_parser("quality", help="Report metadata coverage of the collection")
    add_collection_args(p)
    p.set_defaults(func=cmd_quality)


def _pick(value, default):
    return default if value is None else value


def cmd_similar(args):
    """Print the top-k most similar documents."""
    from paperlink.similarity import top_similar

    config = load_config(args)
    documents, relationships = load_collection(args)
    results = top_similar(
        args.doc_id,
        documents,
        relationships,
        k=_pick(args.top_k, config.top_k),
        min_similarity=_pick(args.min_similarity, config.min_similarity),
        weights=config.weights,
    )
    emit([r.to_dict() for r in results], args.output)


def cmd_matrix(args):
    """Score all pairs; ``.npz`` output gets a sparse matrix plus an id list."""
    from paperlink.config import check_threshold
    from paperlink.corpus import save_json
    from paperlink.similarity import build_similarity_matrix, matrix_to_sparse

    min_similarity = check_threshold("min_similarity", args.min_similarity)
    config = load_config(args)
    documents, relationships = load_collection(args)
    if args.output:
        print(f"Scoring {len(documents)} documents...")
    matrix = build_similarity_matrix(
        documents, relationships, weights=config.weights, show_progress=True
    )

    if args.output and args.output.endswith(".npz"):
        from scipy import sparse

        id_to_index, scores = matrix_to_sparse(matrix, documents, min_similarity=min_similarity)
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        sparse.save_npz(output, scores)
        ids_path = output.with_suffix(".ids.json")
        save_json(sorted(id_to_index, key=id_to_index.get), ids_path)
        print(f"Saved {scores.nnz} non-zero scores to {output} (ids in {ids_path})")
        return

    rows = [r.to_dict() for r in matrix.values() if r.score >= min_similarity]
    emit(rows, args.output)


def cmd_phantoms(args):
    """Print inferred phantom edges."""
    from paperlink.similarity import generate_phantom_edges

    config = load_config(args)
    documents, relationships = load_collection(args)
    edges = generate_phantom_edges(
        documents,
        relationships,
        min_similarity=_pick(args.min_similarity, config.phantom_min_similarity),
        max_per_document=_pick(args.max_per_document, config.max_phantoms_per_document),
        weights=config.weights,
    )
    emit([e.to_dict() for e in edges], args.output)


def cmd_clusters(args):
    """Print cluster assignments, or described clusters with --auto."""
    from paperlink.similarity import generate_auto_clusters, suggest_clusters

    config = load_config(args)
    documents, relationships = load_collection(args)
    min_size = _pick(args.min_size, config.min_cluster_size)

    if args.auto:
        kwargs = {}
        if args.min_similarity is not None:
            kwargs["min_similarity"] = args.min_similarity
        clusters = generate_auto_clusters(
            documents,
            relationships,
            min_cluster_size=min_size,
            max_clusters=args.max_clusters,
            weights=config.weights,
            **kwargs,
        )
        emit([c.to_dict() for c in clusters], args.output)
        return

    assignment = suggest_clusters(
        documents,
        relationships,
        min_cluster_size=min_size,
        min_similarity=_pick(args.min_similarity, config.cluster_min_similarity),
        weights=config.weights,
    )
    emit(assignment, args.output)


def cmd_quality(args):
    """Print metadata coverage."""
    from paperlink.similarity import analyze_metadata_quality

    documents, _ = load_collection(args)
    emit(analyze_metadata_quality(documents).to_dict(), args.output)
