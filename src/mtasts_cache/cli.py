"""mtasts-cache CLI entry point.

Usage: mtasts-cache [-v] {get,refresh,preload-lookup} ...
"""
import argparse
import logging
import sys
from pathlib import Path

from mtasts_cache.cache.policy_cache import PolicyCache
from mtasts_cache.config import CacheSettings
from mtasts_cache.domain.canonical import for_lookup
from mtasts_cache.domain.errors import (
    NoPolicyError,
    PreloadFormatError,
    StorageError,
    TransientResolutionError,
)
from mtasts_cache.domain.policy import Policy
from mtasts_cache.preload.preload_list import PreloadList, read_list

EXIT_OK = 0
EXIT_NO_POLICY = 1
EXIT_TEMPFAIL = 2


def _format_policy(policy: Policy) -> str:
    lines = [f"mode: {policy.mode.value}", f"max_age: {policy.max_age}"]
    lines.extend(f"mx: {mx}" for mx in policy.mx)
    return "\n".join(lines)


def _add_cache_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--cache-dir", type=Path, default=None,
        help="Directory for cached policies (default: in memory only)",
    )
    p.add_argument(
        "--dns-timeout", type=float, default=10.0,
        help="DNS lookup timeout in seconds (default: 10)",
    )
    p.add_argument(
        "--fetch-timeout", type=float, default=60.0,
        help="HTTPS policy fetch timeout in seconds (default: 60)",
    )
    p.add_argument(
        "--preload-list", type=Path, default=None,
        help="Local preload list used as a fallback policy source",
    )


def _settings(args: argparse.Namespace) -> CacheSettings:
    return CacheSettings(
        cache_dir=args.cache_dir,
        dns_timeout=args.dns_timeout,
        fetch_timeout=args.fetch_timeout,
    )


def _load_preload(path: Path | None) -> PreloadList | None:
    if path is None:
        return None
    with open(path, "rb") as f:
        return read_list(f)


def _create_cache(args: argparse.Namespace) -> PolicyCache | None:
    try:
        plist = _load_preload(args.preload_list)
    except (OSError, PreloadFormatError) as err:
        print(f"cannot read preload list: {err}", file=sys.stderr)
        return None
    return _settings(args).create_cache(preload=plist)


def _run_get(args: argparse.Namespace) -> int:
    cache = _create_cache(args)
    if cache is None:
        return EXIT_TEMPFAIL
    with cache:
        try:
            policy = cache.get(args.domain)
        except NoPolicyError:
            print("no policy")
            return EXIT_NO_POLICY
        except TransientResolutionError as err:
            print(f"temporary failure: {err}", file=sys.stderr)
            return EXIT_TEMPFAIL
    print(_format_policy(policy))
    return EXIT_OK


def _run_refresh(args: argparse.Namespace) -> int:
    cache = _create_cache(args)
    if cache is None:
        return EXIT_TEMPFAIL
    with cache:
        try:
            ok = cache.refresh()
        except StorageError as err:
            print(f"cannot list cache: {err}", file=sys.stderr)
            return EXIT_TEMPFAIL
    print(f"refreshed {ok} policies")
    return EXIT_OK


def _run_preload_lookup(args: argparse.Namespace) -> int:
    try:
        plist = _load_preload(args.list_file)
    except (OSError, PreloadFormatError) as err:
        print(f"cannot read preload list: {err}", file=sys.stderr)
        return EXIT_TEMPFAIL

    domain, _ = for_lookup(args.domain)
    entry = plist.lookup(domain)
    if entry is None:
        print("no policy")
        return EXIT_NO_POLICY
    if plist.expired():
        print("warning: preload list is expired", file=sys.stderr)
    print(_format_policy(entry.sts(plist)))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="mtasts-cache",
        description="MTA-STS policy lookups with a downgrade-resistant cache.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    p = subparsers.add_parser("get", help="Look up the policy for a domain.")
    p.add_argument("domain")
    _add_cache_args(p)

    p = subparsers.add_parser("refresh", help="Refresh every cached policy once.")
    _add_cache_args(p)

    p = subparsers.add_parser(
        "preload-lookup", help="Show the preloaded policy for a domain.",
    )
    p.add_argument("list_file", type=Path)
    p.add_argument("domain")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return EXIT_OK
    if args.command == "get":
        return _run_get(args)
    if args.command == "refresh":
        return _run_refresh(args)
    return _run_preload_lookup(args)


if __name__ == "__main__":
    sys.exit(main())
