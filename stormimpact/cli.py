"""
Storm Impact Ranker command line interface
==========================================

Runs the whole pipeline once and prints the rankings:

    python -m stormimpact.cli --events StormData.csv.bz2 \\
        --codes magnitude_codes.csv --event-types event_types.txt

The input files are only read. Use --export to save the rankings
(.json) or the full aggregate table (.csv).
"""

from __future__ import annotations
import argparse
import math
import sys
from typing import List, Optional

from .config import (DEFAULT_CUTOFF_YEAR, DEFAULT_MAX_DISTANCE, DEFAULT_TOP_N,
                     MISSING_POLICIES, PipelineConfig, configure_logging)
from .engine import PipelineResult, export_csv, export_json, run_pipeline
from .loader import DatasetError
from .models import AggregateRecord
from .ranker import MEASURES

TITLES = {
    "fatalities": "Fatalities",
    "injuries": "Injuries",
    "property_damage": "Property damage (US$)",
    "crop_damage": "Crop damage (US$)",
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="stormimpact",
                                 description="Rank weather event types by human and economic impact.")
    ap.add_argument("--events", required=True, help="Storm event CSV (may be .bz2/.gz/.zip compressed)")
    ap.add_argument("--codes", required=True, help="Magnitude-code table CSV (code, multiplier)")
    ap.add_argument("--event-types", required=True, help="Official event type names, one per line")
    ap.add_argument("--cutoff-year", type=int, default=DEFAULT_CUTOFF_YEAR,
                    help=f"First year to include (default {DEFAULT_CUTOFF_YEAR})")
    ap.add_argument("--top", type=int, default=DEFAULT_TOP_N,
                    help=f"Event types per ranking (default {DEFAULT_TOP_N})")
    ap.add_argument("--max-distance", type=int, default=DEFAULT_MAX_DISTANCE,
                    help=f"Largest edit distance accepted as a fuzzy match (default {DEFAULT_MAX_DISTANCE})")
    ap.add_argument("--missing", choices=MISSING_POLICIES, default="propagate",
                    help="How undefined damage values enter group totals")
    ap.add_argument("--export", help="Write rankings (.json) or the aggregate table (.csv)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log stage progress")
    return ap


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        events_path=args.events,
        codes_path=args.codes,
        event_types_path=args.event_types,
        cutoff_year=args.cutoff_year,
        top_n=args.top,
        max_distance=args.max_distance,
        missing_policy=args.missing,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    1) Parse arguments into a PipelineConfig
    2) Run the pipeline
    3) Export (if asked), then print rankings and diagnostics

    Any failure prints `Error: ...` and returns 1 before anything is printed.
    """
    ap = build_parser()
    args = ap.parse_args(argv)
    configure_logging(args.verbose)

    if args.export and not args.export.lower().endswith((".json", ".csv")):
        print("Error: --export path must end in .json or .csv", file=sys.stderr)
        return 1

    try:
        cfg = config_from_args(args)
        result = run_pipeline(cfg)
        if args.export:
            if args.export.lower().endswith(".json"):
                export_json(result, args.export)
            else:
                export_csv(result, args.export)
    except (OSError, DatasetError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for measure in MEASURES:
        print(f"\nTop {len(result.rankings[measure])} by {TITLES[measure]}:")
        _print_rows(result.rankings[measure], measure)
    _print_diagnostics(result)

    if args.export:
        print(f"\nExported to {args.export}")
    return 0


def _fmt(v) -> str:
    if isinstance(v, float):
        return "undefined" if math.isnan(v) else f"{v:,.0f}"
    return f"{v:,}"


def _print_rows(rows: List[AggregateRecord], measure: str) -> None:
    for rank, a in enumerate(rows, start=1):
        print(f"{rank:>3}. {a.event_type:<30} {_fmt(a.value(measure)):>20}")


def _print_diagnostics(result: PipelineResult) -> None:
    d = result.diagnostics()
    print("\nDiagnostics:")
    print(f"  events loaded:        {d['events_loaded']}")
    print(f"  events kept:          {d['events_kept']}")
    print(f"  dropped (no date):    {d['dropped_undated']}")
    print(f"  dropped (too early):  {d['dropped_early']}")
    print(f"  dropped (no impact):  {d['dropped_no_impact']}")
    print(f"  unmatched events:     {d['unmatched_events']} across {len(result.unmatched)} labels")
    if result.unresolved_codes:
        codes = ", ".join(f"{c!r}={n}" for c, n in result.unresolved_codes.most_common())
        print(f"  unresolved codes:     {codes}")


if __name__ == "__main__":
    sys.exit(main())
