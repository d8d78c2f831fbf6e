"""
Record filter
=============

Keeps events from the cutoff year onwards that caused some harm.
Early years only recorded a few event types, and zero-impact rows add
nothing to impact totals.

Rows whose begin date could not be parsed have no year. They are dropped
here under their own counter so the loss is visible in the diagnostics
rather than hidden inside the year comparison.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import List

from .models import EventRecord

logger = logging.getLogger(__name__)


@dataclass
class FilterOutcome:
    """Records that survived plus how many were dropped for each reason."""
    kept: List[EventRecord] = field(default_factory=list)
    dropped_undated: int = 0
    dropped_early: int = 0
    dropped_no_impact: int = 0

    @property
    def dropped(self) -> int:
        return self.dropped_undated + self.dropped_early + self.dropped_no_impact


def filter_events(events: List[EventRecord], cutoff_year: int) -> FilterOutcome:
    """Return records with year >= cutoff_year and a non-zero impact."""
    out = FilterOutcome()
    for e in events:
        if e.year is None:
            out.dropped_undated += 1
        elif e.year < cutoff_year:
            out.dropped_early += 1
        elif not e.has_impact():
            out.dropped_no_impact += 1
        else:
            out.kept.append(e)

    if out.dropped_undated:
        logger.warning("Dropped %d events without a parseable begin date", out.dropped_undated)
    logger.info("Filter kept %d of %d events (before %d: %d, no impact: %d)",
                len(out.kept), len(events), cutoff_year, out.dropped_early, out.dropped_no_impact)
    return out
