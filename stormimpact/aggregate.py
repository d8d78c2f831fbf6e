"""
Aggregator
==========

Groups events by canonical event type and totals the four impact measures.

Undefined damage values (NaN from unknown magnitude codes) follow one of
two policies:

- "propagate": a group with any NaN cost has a NaN total (numpy.sum)
- "zero": NaN costs count as 0 (numpy.nansum)
"""

from __future__ import annotations
import logging
from typing import Dict, List

import numpy as np

from .config import MISSING_POLICIES
from .models import AggregateRecord, EventRecord

logger = logging.getLogger(__name__)


def aggregate_by_type(events: List[EventRecord], missing: str = "propagate") -> List[AggregateRecord]:
    """Return one AggregateRecord per event type, ordered by type name."""
    if missing not in MISSING_POLICIES:
        raise ValueError(f"missing must be one of {MISSING_POLICIES}, got {missing!r}")
    total = np.sum if missing == "propagate" else np.nansum

    groups: Dict[str, List[EventRecord]] = {}
    for e in events:
        groups.setdefault(e.group_key(), []).append(e)

    out: List[AggregateRecord] = []
    for key in sorted(groups):
        members = groups[key]
        prop = np.array([e.property_damage_usd for e in members], dtype=float)
        crop = np.array([e.crop_damage_usd for e in members], dtype=float)
        out.append(AggregateRecord(
            event_type=key,
            event_count=len(members),
            total_fatalities=sum(e.fatalities for e in members),
            total_injuries=sum(e.injuries for e in members),
            total_property_damage_usd=float(total(prop)),
            total_crop_damage_usd=float(total(crop)),
        ))

    undefined = sum(1 for a in out
                    if np.isnan(a.total_property_damage_usd) or np.isnan(a.total_crop_damage_usd))
    if undefined:
        logger.warning("%d of %d event types have an undefined damage total", undefined, len(out))
    logger.info("Aggregated %d events into %d event types", len(events), len(out))
    return out
