"""CLI tool for ingesting files into the repograph vector index.

Usage::

    # Ingest one file
    python -m repograph.cli file ./docs/architecture.md

    # Ingest every supported file under a directory
    python -m repograph.cli directory ./docs --concurrency 4

    # Similarity search, optionally with a generated answer
    python -m repograph.cli query "how are chunks numbered?" --top-k 3 --answer

    # Show vector index statistics
    python -m repograph.cli stats

Configuration comes from the environment / ``.env`` (see ``.env.example``)
and ``config/config.yaml``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from repograph.config.settings import Settings
from repograph.models.document import ProcessingState
from repograph.models.ingestion import IngestionResult
from repograph.models.query import Query, QueryFilter
from repograph.utils.errors import ConfigurationError, RepographError
from repograph.utils.logging import configure_logging

# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _print_result(result: IngestionResult) -> None:
    if result.skipped_duplicate:
        status = "duplicate"
    else:
        status = result.state.value
    print(f"  [{status:<9}] {result.file_name}")
    if result.chunks_indexed:
        print(f"              chunks indexed: {result.chunks_indexed}")
    if result.error:
        print(f"              error: {result.error}")


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_file(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest a single file."""
    print(f"Ingesting file: {args.path}")
    result = await components["ingestion_service"].ingest_file(args.path)
    _print_result(result)
    print(f"\n  Time: {result.ingestion_time:.2f}s")
    return 1 if result.state is ProcessingState.FAILED else 0


async def _handle_directory(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest every supported file under a directory."""
    recursive = not args.no_recursive
    print(f"Ingesting directory: {args.path} (recursive: {recursive})")

    results = await components["ingestion_service"].ingest_directory(
        args.path, recursive=recursive, concurrency=args.concurrency
    )
    for result in results:
        _print_result(result)

    indexed = sum(
        1 for r in results if r.state is ProcessingState.INDEXED and not r.skipped_duplicate
    )
    duplicates = sum(1 for r in results if r.skipped_duplicate)
    failed = sum(1 for r in results if r.state is ProcessingState.FAILED)

    print("\nDirectory ingestion complete:")
    print(f"  Files processed: {len(results)}")
    print(f"  Indexed:         {indexed}")
    print(f"  Duplicates:      {duplicates}")
    print(f"  Failed:          {failed}")
    print(f"  Total chunks:    {sum(r.chunks_indexed for r in results)}")
    return 1 if failed else 0


async def _handle_query(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Run a similarity search and print the ranked hits."""
    query = Query(
        text=args.text,
        top_k=args.top_k,
        namespace=args.namespace,
        filter=QueryFilter(file_type=args.file_type),
    )
    search = components["search_service"]

    if args.answer:
        result = await search.answer(query)
        sources = result.sources
        if result.answer:
            print("Answer")
            print("=" * 40)
            print(result.answer)
            print()
    else:
        sources = await search.search(query)

    if not sources:
        print("No matches.")
        return 0

    print(f"Matches ({len(sources)})")
    print("=" * 40)
    for rank, source in enumerate(sources, start=1):
        print(f"{rank:>2}. {source.score:.4f}  {source.file_path}")
        snippet = " ".join(source.content.split())[:160]
        print(f"    {snippet}")
    return 0


async def _handle_stats(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Print the vector store's index statistics."""
    stats = await components["vector_store"].get_stats()
    print("Index Statistics")
    print("=" * 40)
    print(json.dumps(stats, indent=2, sort_keys=True))
    return 0


_HANDLERS = {
    "file": _handle_file,
    "directory": _handle_directory,
    "query": _handle_query,
    "stats": _handle_stats,
}


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    """Build the components, dispatch the subcommand, close the HTTP client."""
    # Deferred so ``--help`` does not import the web stack.
    from repograph.main import build_components

    components = build_components(app_settings)
    try:
        return await _HANDLERS[args.command](args, components)
    except RepographError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await components["http_client"].aclose()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m repograph.cli",
        description="Ingest local files into the repograph vector index and query it.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- file --
    file_parser = subparsers.add_parser("file", help="Ingest a single file")
    file_parser.add_argument("path", help="Path to the file")

    # -- directory --
    dir_parser = subparsers.add_parser("directory", help="Ingest all files in a directory")
    dir_parser.add_argument("path", help="Directory path")
    dir_parser.add_argument(
        "--no-recursive",
        action="store_true",
        dest="no_recursive",
        help="Only ingest files directly inside the directory",
    )
    dir_parser.add_argument(
        "--concurrency",
        type=int,
        default=1,
        help="Number of files processed at once (default: 1)",
    )

    # -- query --
    query_parser = subparsers.add_parser("query", help="Similarity search over the index")
    query_parser.add_argument("text", help="Query text")
    query_parser.add_argument("--top-k", type=int, default=None, dest="top_k")
    query_parser.add_argument("--namespace", default=None)
    query_parser.add_argument(
        "--file-type", default=None, dest="file_type", help="Restrict to an extension, e.g. .md"
    )
    query_parser.add_argument(
        "--answer", action="store_true", help="Ask the LLM for an answer grounded in the hits"
    )

    # -- stats --
    subparsers.add_parser("stats", help="Show vector index statistics")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses the subcommand, loads Settings from the environment / ``.env``,
    and exits with the handler's status code.  Missing Pinecone or OpenAI
    configuration exits with status 1 before any work is done.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    configure_logging(log_level=app_settings.log_level, json_output=False)

    try:
        exit_code = asyncio.run(_run(args, app_settings))
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
