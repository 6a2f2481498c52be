#!/usr/bin/env python3
"""Run a threaded YCSB-style workload against the configured table store."""

from __future__ import annotations

import argparse
import logging
import sys

from lakebench.config import configure_logging, settings_from_properties
from lakebench.core.client import LakehouseClient
from lakebench.core.workload import WorkloadRunner
from lakebench.models import OperationKind

logger = logging.getLogger("lakebench.run_benchmark")


def _parse_property(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {raw!r}")
    return key.strip(), value.strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a YCSB-style workload through the lakehouse adapter."
    )
    parser.add_argument("--table", default="usertable", help="Table name.")
    parser.add_argument("--threads", type=int, default=4, help="Worker threads.")
    parser.add_argument(
        "--operations", type=int, default=1000, help="Operations per thread."
    )
    parser.add_argument(
        "--record-count", type=int, default=1000, help="Records in the table."
    )
    parser.add_argument(
        "--load", action="store_true", help="Insert the initial records first."
    )
    parser.add_argument("--field-count", type=int, default=10)
    parser.add_argument("--field-length", type=int, default=100)
    parser.add_argument("--scan-length", type=int, default=10)
    for kind in OperationKind:
        parser.add_argument(
            f"--{kind.value}-proportion",
            type=int,
            default=None,
            help=f"Relative weight of {kind.value} operations.",
        )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "-p",
        "--property",
        action="append",
        type=_parse_property,
        default=[],
        help="YCSB-style property, e.g. -p spark.url=spark://host:7077",
    )
    return parser


def main() -> int:
    args = _build_parser().parse_args()
    cfg = settings_from_properties(dict(args.property))
    configure_logging(cfg)

    proportions = {
        kind: getattr(args, f"{kind.value}_proportion")
        for kind in OperationKind
        if getattr(args, f"{kind.value}_proportion")
    }

    client = LakehouseClient.from_settings(cfg)
    try:
        runner = WorkloadRunner(
            client,
            args.table,
            threads=args.threads,
            operations_per_thread=args.operations,
            proportions=proportions or None,
            record_count=args.record_count,
            field_count=args.field_count,
            field_length=args.field_length,
            scan_length=args.scan_length,
            seed=args.seed,
        )
        if args.load:
            runner.load()
        result = runner.run()
    except KeyboardInterrupt:
        print("[lakebench] interrupted", file=sys.stderr)
        return 130
    finally:
        client.cleanup()

    for (kind, status), n in sorted(
        result.counts.items(), key=lambda item: (item[0][0].value, item[0][1].value)
    ):
        print(f"[lakebench] {kind.value:<7} {status.value:<10} {n}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
