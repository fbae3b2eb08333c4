"""
Top-level CLI dispatcher: feescope <command> [args...].

  feescope snapshot [--chains btc,eth] [--indent N] [--meta]
  feescope chains
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .. import config
from .._version import __version__


def _setup_logging(level: Optional[str]) -> None:
    logging.basicConfig(
        level=(level or config.log_level()).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _main_snapshot(args: argparse.Namespace) -> int:
    from ..fees.schema import validate_snapshot
    from ..snapshot import generate_snapshot_sync
    from ..state import FetchMeta

    keys = [k.strip() for k in args.chains.split(",") if k.strip()] if args.chains else None
    meta = FetchMeta()
    snapshot = generate_snapshot_sync(keys, fetch_meta=meta)
    out = snapshot.to_dict()
    if args.meta:
        out["meta"] = meta.as_dict()
    print(json.dumps(out, indent=args.indent or None, sort_keys=False))
    if not snapshot.chains:
        return 1
    if args.strict and not validate_snapshot(snapshot):
        return 2
    return 0


def _main_chains(args: argparse.Namespace) -> int:
    from ..chains import build_default_chain_registry

    registry = build_default_chain_registry()
    for chain in registry:
        rng = chain.usd_range
        print(
            f"{chain.key:<8} {chain.symbol:<6} {chain.type.value:<8} "
            f"${rng.min_usd:g}-${rng.max_usd:g}  {chain.label}"
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="feescope",
        description="Multi-chain transaction fee snapshot",
    )
    parser.add_argument("--version", action="version", version=f"feescope {__version__}")
    parser.add_argument("--log-level", default=None, help="Override logging.level from config")
    subparsers = parser.add_subparsers(dest="command", help="command")

    snap = subparsers.add_parser("snapshot", help="Build a fee snapshot and print it as JSON")
    snap.add_argument("--chains", default=None, help="Comma-separated chain keys (default: all enabled)")
    snap.add_argument("--indent", type=int, default=2, help="JSON indent (0 for compact)")
    snap.add_argument("--meta", action="store_true", help="Include fetch metadata in the output")
    snap.add_argument(
        "--strict",
        action="store_true",
        help="Exit 2 unless every chain entry is publishable (ok or estimated)",
    )

    subparsers.add_parser("chains", help="List configured chains")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    _setup_logging(args.log_level)

    if args.command == "snapshot":
        return _main_snapshot(args)
    if args.command == "chains":
        return _main_chains(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
