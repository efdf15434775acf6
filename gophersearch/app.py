import argparse
import json
import sys

from . import __version__
from .config import ClientConfig, logging_from_env
from .env import load_env
from .errors import ConfigError
from .logger import configure_logger, get_logger
from .search import search


def _config_from_args(args: argparse.Namespace) -> ClientConfig:
    overrides = {}
    if getattr(args, "base_url", None):
        overrides["base_url"] = args.base_url
    if getattr(args, "max_results", None) is not None:
        overrides["max_results"] = args.max_results
    try:
        return ClientConfig.from_env(**overrides)
    except ConfigError as e:
        raise SystemExit(str(e))


def cmd_serve(args: argparse.Namespace) -> None:
    from .server import run_server

    config = _config_from_args(args)
    run_server(config)


def cmd_search(args: argparse.Namespace) -> None:
    config = _config_from_args(args)
    output = search(args.query, config=config, timeout=args.timeout)
    print(json.dumps(output.to_dict(), indent=2, ensure_ascii=False))
    get_logger().log_metrics_summary()
    if output.error:
        raise SystemExit(1)


def main(argv=None):
    # Load .env if present (GOPHER_API, MAX_RESULTS, GOPHER_BASE_URL, ...)
    load_env()
    parser = argparse.ArgumentParser(prog="gophersearch", description="Gopher AI search client and MCP server")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    srv = subparsers.add_parser("serve", help="Run the MCP server over stdio")
    srv.add_argument("--base-url", help="API base URL (or set GOPHER_BASE_URL)")
    srv.add_argument("--max-results", type=int, help="Results per search (or set MAX_RESULTS, default 15)")
    srv.set_defaults(func=cmd_serve)

    srch = subparsers.add_parser("search", help="Run one twitter search and print the results as JSON")
    srch.add_argument("--query", required=True, help="Search terms")
    srch.add_argument("--base-url", help="API base URL (or set GOPHER_BASE_URL)")
    srch.add_argument("--max-results", type=int, help="Results to request (or set MAX_RESULTS, default 15)")
    srch.add_argument("--timeout", type=float, help="Give up polling after this many seconds")
    srch.set_defaults(func=cmd_search)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    level, log_dir = logging_from_env()
    configure_logger(level=level, log_dir=log_dir)

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help(sys.stderr)


if __name__ == "__main__":
    main()
