"""Command line interface for ASC decoding."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from .config import ReaderConfig
from .domain import AscRecording
from .io import write_tsv
from .reader import AscReader


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decode EyeLink ASC exports")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Summarize an ASC file")
    info.add_argument("input", help="Path to .asc or .asc.gz file")

    export = sub.add_parser("export", help="Write decoded tables as TSV files")
    export.add_argument("input", help="Path to .asc or .asc.gz file")
    export.add_argument("output", help="Directory receiving raw.tsv, msg.tsv, fix.tsv, ...")
    export.add_argument("--jobs", type=int, default=1, help="Parallel workers for block decoding (-1 = all cores)")

    return parser


def summarize(rec: AscRecording) -> None:
    print(f"Schema: {rec.schema if rec.schema is not None else 'no raw samples'}")
    print(f"Trials: {len(rec.trial_ids)} (excluded unterminated: {rec.excluded_trials})")
    for kind, table in rec.tables().items():
        if table is None:
            print(f"  {kind:<7} absent")
        elif isinstance(table, pd.DataFrame):
            print(f"  {kind:<7} {len(table)} rows")
        else:
            print(f"  {kind:<7} not merged ({len(table)} blocks)")
    if rec.diagnostics:
        print("Diagnostics:")
        for diag in rec.diagnostics:
            print(f"  {diag}")


def export_tables(rec: AscRecording, output_dir: str | Path) -> list[Path]:
    """Write every merged table of ``rec`` to ``output_dir``; returns the written paths."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    tables = dict(rec.tables(), trials=rec.trials)
    for kind, table in tables.items():
        if isinstance(table, pd.DataFrame):
            path = output_dir / f"{kind}.tsv"
            write_tsv(table, path)
            written.append(path)
    return written


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "info":
        summarize(AscReader().read(args.input))
        return

    if args.command == "export":
        rec = AscReader(ReaderConfig(n_jobs=args.jobs)).read(args.input)
        for path in export_tables(rec, args.output):
            print(path)
        return


if __name__ == "__main__":
    main()
