"""
Data model
==========

Each row of the storm event file is converted into an `EventRecord`.
Records are immutable (`frozen=True`); later stages fill in the derived
fields (canonical type, damage in US$) by building new records with
`dataclasses.replace` instead of editing the loaded ones.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Optional, Tuple

# Official event type names, uppercased, in file order.
CanonicalEventList = Tuple[str, ...]


@dataclass(frozen=True)
class EventRecord:
    """One storm event row plus the fields derived from it."""
    event_id: int
    year: Optional[int]
    event_type: str
    fatalities: int
    injuries: int
    property_damage_magnitude: float
    property_damage_code: str
    crop_damage_magnitude: float
    crop_damage_code: str

    # filled by the normalizer
    canonical_type: Optional[str] = None
    matched: bool = False
    # filled by the cost calculator, NaN when the code is unknown
    property_damage_usd: float = math.nan
    crop_damage_usd: float = math.nan

    def has_impact(self) -> bool:
        """True if any of the four impact measures is non-zero."""
        return (self.fatalities != 0 or self.injuries != 0
                or self.property_damage_magnitude != 0
                or self.crop_damage_magnitude != 0)

    def group_key(self) -> str:
        return self.canonical_type if self.canonical_type is not None else self.event_type.strip().upper()


@dataclass(frozen=True)
class MagnitudeCode:
    """One row of the magnitude-code table, e.g. K -> 1e3."""
    code: str
    multiplier: float


@dataclass(frozen=True)
class AggregateRecord:
    """Impact totals for one canonical event type."""
    event_type: str
    event_count: int
    total_fatalities: int
    total_injuries: int
    # stored in US$
    total_property_damage_usd: float
    total_crop_damage_usd: float

    def value(self, measure: str):
        """Return the total for one of the ranking measures."""
        if measure == "fatalities":
            return self.total_fatalities
        if measure == "injuries":
            return self.total_injuries
        if measure == "property_damage":
            return self.total_property_damage_usd
        if measure == "crop_damage":
            return self.total_crop_damage_usd
        raise ValueError(f"Unknown measure: {measure}")
