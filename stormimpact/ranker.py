"""
Ranker
======

Produces the top-N event types for each impact measure. The four rankings
are independent sorts of the same aggregate table.

Undefined (NaN) totals rank below every defined total.
"""

from __future__ import annotations
import math
from typing import Callable, Dict, List, Tuple

import pandas as pd

from .config import DEFAULT_TOP_N
from .dsa import merge_sort
from .models import AggregateRecord

MEASURES: Tuple[str, ...] = ("fatalities", "injuries", "property_damage", "crop_damage")

_ALIASES: Dict[str, str] = {
    "fatalities": "fatalities", "deaths": "fatalities",
    "injuries": "injuries",
    "property_damage": "property_damage", "property": "property_damage", "propdmg": "property_damage",
    "crop_damage": "crop_damage", "crop": "crop_damage", "cropdmg": "crop_damage",
}


def measure_name(measure: str) -> str:
    """Resolve a measure name or alias (e.g. "deaths") to its canonical name."""
    m = _ALIASES.get(measure.lower().strip())
    if m is None:
        raise ValueError(f"measure must be one of: {', '.join(MEASURES)}")
    return m


def _rank_key(measure: str) -> Callable[[AggregateRecord], tuple]:
    def key(a: AggregateRecord) -> tuple:
        v = a.value(measure)
        if isinstance(v, float) and math.isnan(v):
            return (0, 0.0)
        return (1, v)
    return key


def top_n(aggregates: List[AggregateRecord], measure: str, n: int = DEFAULT_TOP_N) -> List[AggregateRecord]:
    """Top `n` event types by `measure`, descending; ties keep table order."""
    m = measure_name(measure)
    ranked = merge_sort(aggregates, key=_rank_key(m), reverse=True)
    return ranked[:n]


def rank_all(aggregates: List[AggregateRecord], n: int = DEFAULT_TOP_N) -> Dict[str, List[AggregateRecord]]:
    return {m: top_n(aggregates, m, n) for m in MEASURES}


def ranking_frame(rows: List[AggregateRecord], measure: str) -> pd.DataFrame:
    """Two-column frame (event_type, measure) in ranking order, ready for a bar chart."""
    m = measure_name(measure)
    return pd.DataFrame({
        "event_type": [a.event_type for a in rows],
        m: [a.value(m) for a in rows],
    })
