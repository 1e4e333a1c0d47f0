import argparse
from pathlib import Path

import anyio

from src.toolfilter.cli import cmd_evaluate, cmd_filter, cmd_stats
from src.utils.logger import configure_logging


def parse_args():
    parser = argparse.ArgumentParser(description="Semantic tool filter for MCP catalogs")
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO"
    )
    parser.add_argument(
        "--settings", type=Path, default=None,
        help="Path to settings YAML. Defaults to ~/.config/tool-filter/settings.yaml"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # filter
    flt = sub.add_parser("filter", help="Rank catalog tools against a query")
    flt.add_argument("query", type=str)
    flt.add_argument("--catalog", type=Path, required=True, help="Catalog JSON or YAML")
    flt.add_argument("--top-k", type=int, default=None)
    flt.add_argument("--min-score", type=float, default=None)
    flt.add_argument("--always-include", nargs="*", default=None, metavar="TOOL")
    flt.add_argument("--exclude", nargs="*", default=None, metavar="TOOL")
    flt.add_argument("--context-messages", type=int, default=None)
    flt.add_argument("--max-context-tokens", type=int, default=None)
    flt.add_argument("--debug", action="store_true", help="Log per-stage timings")

    # stats
    stats = sub.add_parser("stats", help="Build the registry and show its stats")
    stats.add_argument("--catalog", type=Path, required=True)

    # evaluate
    ev = sub.add_parser("evaluate", help="Measure retrieval quality on labelled queries")
    ev.add_argument("--catalog", type=Path, required=True)
    ev.add_argument("--cases", type=Path, required=True, help="YAML list of {query, expected_tools}")
    ev.add_argument("--top-k", type=int, default=None)

    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    level = "DEBUG" if getattr(args, "debug", False) else args.log_level
    configure_logging(level=level)

    if args.command == "filter":
        async def _filter():
            return await cmd_filter(
                args.query,
                args.catalog,
                settings_path=args.settings,
                top_k=args.top_k,
                min_score=args.min_score,
                always_include=args.always_include,
                exclude=args.exclude,
                context_messages=args.context_messages,
                max_context_tokens=args.max_context_tokens,
                debug=args.debug,
            )
        print(anyio.run(_filter))

    elif args.command == "stats":
        async def _stats():
            return await cmd_stats(args.catalog, settings_path=args.settings)
        print(anyio.run(_stats))

    elif args.command == "evaluate":
        async def _evaluate():
            return await cmd_evaluate(
                args.catalog, args.cases, settings_path=args.settings, top_k=args.top_k
            )
        print(anyio.run(_evaluate))
