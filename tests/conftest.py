"""
Shared fixtures: small synthetic storm inputs written to tmp_path.
"""

import bz2
import csv

import pytest

from stormimpact.models import EventRecord, MagnitudeCode

EVENT_HEADER = ["STATE__", "BGN_DATE", "EVTYPE", "FATALITIES", "INJURIES",
                "PROPDMG", "PROPDMGEXP", "CROPDMG", "CROPDMGEXP", "REMARKS"]

EVENT_ROWS = [
    ["1", "1/15/1995 0:00:00", "TORNADO", "5", "10", "100", "K", "0", "", "too early"],
    ["1", "4/18/1997 0:00:00", "TSTM WIND", "1", "2", "2.5", "K", "0", "", ""],
    ["2", "5/1/1998 0:00:00", "RIVER FLOODING", "2", "0", "1", "M", "3", "Z", "unknown crop code"],
    ["2", "6/2/1998 0:00:00", " flash flood ", "1", "0", "0", "", "0", "", ""],
    ["3", "not a date", "TORNADO", "3", "0", "0", "", "0", "", "bad date"],
    ["3", "7/4/2000 0:00:00", "TORNADO", "0", "0", "0", "", "0", "", "no impact"],
    ["22", "8/29/2005 0:00:00", "HURRICANE KATRINA", "10", "5", "2", "B", "1", "M", ""],
    ["4", "3/3/2001 0:00:00", "TORNDAO", "0", "4", "50", "K", "0", "", "typo"],
    ["5", "9/9/2009 0:00:00", "SEVERE TURBULENCE", "0", "1", "0", "", "0", "", "no official type"],
]

CANONICAL = (
    "THUNDERSTORM WIND", "TORNADO", "FLOOD", "FLASH FLOOD", "HAIL", "EXCESSIVE HEAT",
    "HEAT", "LIGHTNING", "WINTER WEATHER", "WINTER STORM", "HURRICANE (TYPHOON)",
    "WILDFIRE", "DROUGHT", "HIGH WIND", "RIP CURRENT",
)

CODE_ROWS = [("", "0"), ("K", "1e3"), ("M", "1e6"), ("B", "1e9")]


@pytest.fixture
def canonical():
    return CANONICAL


@pytest.fixture
def codes():
    return [MagnitudeCode(code=c, multiplier=float(m)) for c, m in CODE_ROWS]


@pytest.fixture
def events_csv(tmp_path):
    """Storm event rows as a bz2-compressed CSV, like the published export."""
    path = tmp_path / "StormData.csv.bz2"
    with bz2.open(path, "wt", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(EVENT_HEADER)
        w.writerows(EVENT_ROWS)
    return str(path)


@pytest.fixture
def codes_csv(tmp_path):
    path = tmp_path / "magnitude_codes.csv"
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["code", "multiplier"])
        w.writerows(CODE_ROWS)
    return str(path)


@pytest.fixture
def event_types_txt(tmp_path):
    path = tmp_path / "event_types.txt"
    # mixed case, blank line and a duplicate, as hand-edited lists tend to be
    lines = [name.title() for name in CANONICAL] + ["", "  tornado  "]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def make_event():
    """Factory for EventRecord with harmless defaults."""
    counter = {"next": 0}

    def _make(event_type="TORNADO", year=2000, fatalities=0, injuries=0,
              prop=0.0, prop_code="", crop=0.0, crop_code="", **derived):
        counter["next"] += 1
        return EventRecord(
            event_id=counter["next"],
            year=year,
            event_type=event_type,
            fatalities=fatalities,
            injuries=injuries,
            property_damage_magnitude=prop,
            property_damage_code=prop_code,
            crop_damage_magnitude=crop,
            crop_damage_code=crop_code,
            **derived,
        )

    return _make
