"""
Command line entry point.

    context-window ingest my-book ./docs ./notes.md
    context-window ask my-book "When was America founded?"
"""
import argparse
import asyncio
import sys

from .config import ContextWindowOptions
from .errors import ContextWindowError
from .registry import WindowRegistry


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="context-window",
        description="Ingest documents and ask grounded questions about them"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Ingest files or directories into a namespace")
    ingest.add_argument("namespace")
    ingest.add_argument("paths", nargs="+", metavar="PATH")
    ingest.add_argument("--chunk-size", type=int, default=None)
    ingest.add_argument("--chunk-overlap", type=int, default=None)

    ask = subparsers.add_parser("ask", help="Ask a question against an ingested namespace")
    ask.add_argument("namespace")
    ask.add_argument("question")
    ask.add_argument("--model", default=None, help="Bedrock model ID used for answers")
    ask.add_argument("--top-k", type=int, default=None)
    ask.add_argument("--max-context-chars", type=int, default=None)
    ask.add_argument("--score-threshold", type=float, default=None)

    return parser


async def run(args: argparse.Namespace, registry: WindowRegistry) -> int:
    if args.command == "ingest":
        await registry.create(ContextWindowOptions(
            namespace=args.namespace,
            data=args.paths,
            chunk_size=args.chunk_size,
            chunk_overlap=args.chunk_overlap,
        ))
        print(f"Namespace '{args.namespace}' is ready")
        return 0

    window = registry.get(
        args.namespace,
        ai_model=args.model,
        top_k=args.top_k,
        max_context_chars=args.max_context_chars,
        score_threshold=args.score_threshold,
    )
    result = await window.ask(args.question)
    print(result.text)
    if result.sources:
        print("\nSources:")
        for source in result.sources:
            print(f"  - {source}")
    return 0


def main(argv=None, registry: WindowRegistry = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if registry is None:
            registry = WindowRegistry()
        return asyncio.run(run(args, registry))
    except ContextWindowError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
