"""Command-line entry point.

Ingest the knowledge base::

    kb-ingest ingest --input-dir ./assets --collection kb_docs_v1

Remove every chunk of one source file::

    kb-ingest remove --field fileName --value onboarding-guide
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from kb_ingest.config import Settings, settings
from kb_ingest.errors import IngestionError
from kb_ingest.ingestion.pipeline import IngestionPipeline
from kb_ingest.maintenance import delete_by_filter
from kb_ingest.store import get_vector_store

logger = logging.getLogger("kb_ingest")

# argparse dest → Settings field
_INGEST_OVERRIDES = {
    "collection": "collection_name",
    "chunk_size": "chunk_size",
    "chunk_overlap": "chunk_overlap",
    "embed_batch_size": "embed_batch_size",
    "upsert_batch_size": "upsert_batch_size",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kb-ingest",
        description="Chunk a knowledge-base directory and upsert it into a vector store.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Load, chunk, embed and upsert the input directory")
    ingest.add_argument("--input-dir", help="Directory of .md/.txt files (default: INPUT_DIR)")
    ingest.add_argument("--collection", help="Target collection (default: COLLECTION_NAME)")
    ingest.add_argument("--chunk-size", type=int, help="Target chunk size in estimated tokens")
    ingest.add_argument("--chunk-overlap", type=int, help="Overlap between chunks in estimated tokens")
    ingest.add_argument("--embed-batch-size", type=int, help="Texts per embedding call")
    ingest.add_argument("--upsert-batch-size", type=int, help="Points per upsert call")

    remove = sub.add_parser("remove", help="Delete records whose payload field equals a value")
    remove.add_argument("--field", required=True, help="Payload field, e.g. fileName")
    remove.add_argument("--value", required=True, help="Value to match")
    remove.add_argument(
        "--int",
        dest="as_int",
        action="store_true",
        help="Match the value as an integer (sectionIndex, chunkIndex)",
    )
    remove.add_argument("--collection", help="Target collection (default: COLLECTION_NAME)")
    return parser


def _ingest(args: argparse.Namespace, cfg: Settings) -> int:
    overrides = {
        field: getattr(args, dest)
        for dest, field in _INGEST_OVERRIDES.items()
        if getattr(args, dest) is not None
    }
    pipeline = IngestionPipeline.from_settings(cfg, **overrides)
    report = pipeline.run(args.input_dir or cfg.input_dir, cfg.extensions)
    print(report)
    return 0


def _remove(args: argparse.Namespace, cfg: Settings) -> int:
    try:
        value = int(args.value) if args.as_int else args.value
    except ValueError:
        logger.error("--value %r is not an integer", args.value)
        return 1
    store = get_vector_store(cfg, args.collection)
    report = delete_by_filter(store, args.field, value)
    print(f"Found {report.matched} matching records; deleted {report.deleted} from {report.collection}.")
    return 0


def main(argv: Sequence[str] | None = None, cfg: Settings = settings) -> int:
    """Run the CLI and return the process exit status."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    handler = _ingest if args.command == "ingest" else _remove
    try:
        return handler(args, cfg)
    except IngestionError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        if exc.__cause__ is not None:
            logger.error("caused by: %r", exc.__cause__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
