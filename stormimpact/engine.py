"""
Pipeline engine
===============

Runs the stages once, in order:

1) Load events, magnitude codes and the official event type list
2) Filter to the analysis window and to events that caused harm
3) Normalize free-text event labels to official event types
4) Compute property and crop damage in US$
5) Aggregate impact totals per event type
6) Rank the top-N event types for each measure

Each stage returns new data; nothing is shared between stages except what
is passed along. The result also carries the data-quality diagnostics
(dropped rows, unmatched labels, unknown magnitude codes).
"""

from __future__ import annotations
from collections import Counter
from dataclasses import asdict, dataclass, field
import csv
import json
import logging
import math
from typing import Dict, List, Optional

from .aggregate import aggregate_by_type
from .config import PipelineConfig
from .costs import apply_costs, multiplier_lookup, unresolved_codes
from .filters import FilterOutcome, filter_events
from .loader import load_canonical_events, load_events, load_magnitude_codes
from .models import AggregateRecord, CanonicalEventList, EventRecord, MagnitudeCode
from .normalizer import EditDistanceMatcher, LabelMatcher, Normalizer
from .ranker import rank_all

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything a run produces: aggregate table, rankings, diagnostics."""
    aggregates: List[AggregateRecord]
    rankings: Dict[str, List[AggregateRecord]]
    filter_outcome: FilterOutcome
    unmatched: Counter = field(default_factory=Counter)
    unresolved_codes: Counter = field(default_factory=Counter)
    events_loaded: int = 0

    @property
    def unmatched_count(self) -> int:
        return sum(self.unmatched.values())

    @property
    def total_fatalities(self) -> int:
        return sum(a.total_fatalities for a in self.aggregates)

    def diagnostics(self) -> Dict[str, object]:
        fo = self.filter_outcome
        return {
            "events_loaded": self.events_loaded,
            "events_kept": len(fo.kept),
            "dropped_undated": fo.dropped_undated,
            "dropped_early": fo.dropped_early,
            "dropped_no_impact": fo.dropped_no_impact,
            "unmatched_events": self.unmatched_count,
            "unmatched_labels": dict(self.unmatched.most_common()),
            "unresolved_codes": dict(self.unresolved_codes.most_common()),
        }


@dataclass
class ImpactPipeline:
    """One batch run over in-memory inputs.

    Use `from_config` to load the inputs from disk, or build it directly
    from records (tests do this).
    """
    events: List[EventRecord]
    codes: List[MagnitudeCode]
    canonical: CanonicalEventList
    config: PipelineConfig = field(default_factory=PipelineConfig)
    matcher: Optional[LabelMatcher] = None

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "ImpactPipeline":
        config.validate()
        config.require_paths()
        return cls(
            events=load_events(config.events_path, date_format=config.date_format),
            codes=load_magnitude_codes(config.codes_path),
            canonical=load_canonical_events(config.event_types_path),
            config=config,
        )

    def run(self) -> PipelineResult:
        cfg = self.config
        cfg.validate()

        outcome = filter_events(self.events, cfg.cutoff_year)

        matcher = self.matcher or EditDistanceMatcher(max_distance=cfg.max_distance)
        normalized = Normalizer(canonical=self.canonical, matcher=matcher).normalize(outcome.kept)

        lookup = multiplier_lookup(self.codes)
        missing_codes = unresolved_codes(normalized.events, lookup)
        if missing_codes:
            logger.warning("Magnitude codes without a multiplier: %s", dict(missing_codes.most_common()))
        costed = apply_costs(normalized.events, lookup)

        aggregates = aggregate_by_type(costed, missing=cfg.missing_policy)
        return PipelineResult(
            aggregates=aggregates,
            rankings=rank_all(aggregates, cfg.top_n),
            filter_outcome=outcome,
            unmatched=normalized.unmatched,
            unresolved_codes=missing_codes,
            events_loaded=len(self.events),
        )


def run_pipeline(config: PipelineConfig) -> PipelineResult:
    """Load the inputs named in `config` and run every stage once."""
    return ImpactPipeline.from_config(config).run()


# ---------------- Export ----------------
def _json_number(v):
    # JSON has no NaN; undefined totals are written as null
    if isinstance(v, float) and math.isnan(v):
        return None
    return v


def _aggregate_dict(a: AggregateRecord) -> Dict[str, object]:
    return {k: _json_number(v) for k, v in asdict(a).items()}


def export_json(result: PipelineResult, path: str) -> None:
    """Write the four rankings and the diagnostics to a JSON file."""
    payload = {
        "rankings": {m: [_aggregate_dict(a) for a in rows] for m, rows in result.rankings.items()},
        "diagnostics": result.diagnostics(),
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def export_csv(result: PipelineResult, path: str) -> None:
    """Write the full aggregate table (one row per event type) to CSV."""
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["event_type", "event_count", "total_fatalities", "total_injuries",
                    "total_property_damage_usd", "total_crop_damage_usd"])
        for a in result.aggregates:
            w.writerow([a.event_type, a.event_count, a.total_fatalities, a.total_injuries,
                        a.total_property_damage_usd, a.total_crop_damage_usd])
