"""
Cost calculator
===============

Damage figures in storm data are split into a magnitude (2.5) and a code
("K"). The code is looked up in the magnitude-code table and the product
is the damage in US$.

Codes missing from the table give NaN, never 0 and never the bare
magnitude, so unknown scales stay visible downstream.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import replace
import math
from typing import Dict, Iterable, List

from .models import EventRecord, MagnitudeCode


def multiplier_lookup(codes: Iterable[MagnitudeCode]) -> Dict[str, float]:
    """Build an exact-match code -> multiplier map."""
    lookup: Dict[str, float] = {}
    for mc in codes:
        if mc.code in lookup:
            raise ValueError(f"Duplicate magnitude code: {mc.code!r}")
        lookup[mc.code] = mc.multiplier
    return lookup


def resolve_multiplier(code: str, lookup: Dict[str, float]) -> float:
    return lookup.get(code, math.nan)


def damage_usd(magnitude: float, code: str, lookup: Dict[str, float]) -> float:
    return magnitude * resolve_multiplier(code, lookup)


def apply_costs(events: List[EventRecord], lookup: Dict[str, float]) -> List[EventRecord]:
    """Return copies of `events` with property and crop damage in US$."""
    return [
        replace(
            e,
            property_damage_usd=damage_usd(e.property_damage_magnitude, e.property_damage_code, lookup),
            crop_damage_usd=damage_usd(e.crop_damage_magnitude, e.crop_damage_code, lookup),
        )
        for e in events
    ]


def unresolved_codes(events: Iterable[EventRecord], lookup: Dict[str, float]) -> Counter:
    """Count property and crop codes that have no entry in the table."""
    missing: Counter = Counter()
    for e in events:
        for code in (e.property_damage_code, e.crop_damage_code):
            if code not in lookup:
                missing[code] += 1
    return missing
