"""
Dataset loader (CSV -> EventRecord list)
========================================

This module reads the three inputs of a run:

- the storm event file (CSV, usually bz2 compressed) -> `EventRecord` list
- the magnitude-code table (CSV: code, multiplier) -> `MagnitudeCode` list
- the official event type list (plain text, one name per line)

Key ideas:
- Column names are matched by alias, ignoring case and punctuation,
  because storm data exports differ between sources.
- Everything is read as text first and converted explicitly, so magnitude
  codes such as "0" or "+" stay strings and bad numbers fail loudly.
- Unparseable begin dates become `year=None`; the filter decides what
  to do with them.
"""

from __future__ import annotations
import logging
import os
import re
from typing import Dict, List

import pandas as pd

from .config import DEFAULT_DATE_FORMAT
from .models import CanonicalEventList, EventRecord, MagnitudeCode

logger = logging.getLogger(__name__)


class DatasetError(ValueError):
    """An input file exists but its content cannot be used."""


# Accepted header spellings for each field the pipeline needs
EVENT_COLUMNS: Dict[str, tuple] = {
    "begin_date": ("BGN_DATE", "BEGIN_DATE", "Begin Date"),
    "event_type": ("EVTYPE", "EVENT_TYPE", "Event Type"),
    "fatalities": ("FATALITIES", "DEATHS", "Deaths"),
    "injuries": ("INJURIES", "Injuries"),
    "property_damage_magnitude": ("PROPDMG", "PROPERTY_DAMAGE", "Property Damage"),
    "property_damage_code": ("PROPDMGEXP", "PROPERTY_DAMAGE_CODE", "Property Damage Exp"),
    "crop_damage_magnitude": ("CROPDMG", "CROP_DAMAGE", "Crop Damage"),
    "crop_damage_code": ("CROPDMGEXP", "CROP_DAMAGE_CODE", "Crop Damage Exp"),
}

CODE_COLUMNS: Dict[str, tuple] = {
    "code": ("code", "exp", "exponent"),
    "multiplier": ("multiplier", "value", "factor"),
}


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(df: pd.DataFrame, *names: str) -> str:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise DatasetError(f"Missing required column. Tried={names}. Available={cols}")


def _check_exists(path: str) -> None:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input not found: {path}")


def _read_text_table(path: str, **kwargs) -> pd.DataFrame:
    """Read a CSV (compression inferred from the suffix) with every cell as text."""
    _check_exists(path)
    try:
        return pd.read_csv(path, dtype=str, keep_default_na=False, compression="infer", **kwargs)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, EOFError, OSError) as e:
        raise DatasetError(f"Could not read {path}: {e}") from e


def _to_numeric(df: pd.DataFrame, col: str) -> pd.Series:
    """Convert a text column to numbers; blank cells count as 0."""
    raw = df[col].str.strip()
    raw = raw.mask(raw == "", "0")
    try:
        return pd.to_numeric(raw, errors="raise")
    except (ValueError, TypeError) as e:
        raise DatasetError(f"Column {col!r} holds a non-numeric value: {e}") from e


def _to_count(df: pd.DataFrame, col: str) -> pd.Series:
    """Like `_to_numeric`, but the values must be whole numbers >= 0."""
    values = _to_numeric(df, col)
    bad = values[(values % 1 != 0) | (values < 0)]
    if len(bad):
        raise DatasetError(f"Column {col!r} holds a non-integral or negative count: "
                           f"{bad.iloc[0]!r} at row {bad.index[0]}")
    return values.astype("int64")


def load_events(path: str, date_format: str = DEFAULT_DATE_FORMAT) -> List[EventRecord]:
    """Load the storm event file into a list of records.

    Only the columns named in `EVENT_COLUMNS` are read; the rest of the
    export is skipped at parse time to keep memory down.
    """
    wanted = {_norm(alias) for aliases in EVENT_COLUMNS.values() for alias in aliases}
    df = _read_text_table(path, usecols=lambda c: _norm(c) in wanted)
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)

    cols = {field: _col(df, *aliases) for field, aliases in EVENT_COLUMNS.items()}

    dates = pd.to_datetime(df[cols["begin_date"]].str.strip(), format=date_format, errors="coerce")
    undated = int(dates.isna().sum())
    if undated:
        logger.warning("%d of %d rows in %s have an unparseable begin date", undated, len(df), path)

    years = [None if pd.isna(y) else int(y) for y in dates.dt.year]
    event_types = df[cols["event_type"]].tolist()
    fatalities = _to_count(df, cols["fatalities"]).tolist()
    injuries = _to_count(df, cols["injuries"]).tolist()
    prop_mag = _to_numeric(df, cols["property_damage_magnitude"]).tolist()
    prop_code = df[cols["property_damage_code"]].str.strip().tolist()
    crop_mag = _to_numeric(df, cols["crop_damage_magnitude"]).tolist()
    crop_code = df[cols["crop_damage_code"]].str.strip().tolist()

    events: List[EventRecord] = []
    for i, row in enumerate(zip(years, event_types, fatalities, injuries,
                                prop_mag, prop_code, crop_mag, crop_code)):
        year, etype, fat, inj, pmag, pcode, cmag, ccode = row
        events.append(EventRecord(
            event_id=i,
            year=year,
            event_type=etype,
            fatalities=int(fat),
            injuries=int(inj),
            property_damage_magnitude=float(pmag),
            property_damage_code=pcode,
            crop_damage_magnitude=float(cmag),
            crop_damage_code=ccode,
        ))
    logger.info("Loaded %d events from %s", len(events), path)
    return events


def load_magnitude_codes(path: str) -> List[MagnitudeCode]:
    """Load the code -> multiplier table. A blank code cell is the blank code."""
    df = _read_text_table(path)
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    code_col = _col(df, *CODE_COLUMNS["code"])
    mult_col = _col(df, *CODE_COLUMNS["multiplier"])

    codes = df[code_col].str.strip()
    dupes = sorted(set(codes[codes.duplicated()]))
    if dupes:
        raise DatasetError(f"Duplicate magnitude codes in {path}: {dupes}")

    try:
        multipliers = pd.to_numeric(df[mult_col].str.strip(), errors="raise")
    except (ValueError, TypeError) as e:
        raise DatasetError(f"Column {mult_col!r} in {path} holds a non-numeric multiplier: {e}") from e
    if multipliers.isna().any():
        blank = sorted(set(codes[multipliers.isna()]))
        raise DatasetError(f"Blank multiplier in {path} for code(s): {blank}")

    table = [MagnitudeCode(code=c, multiplier=float(m)) for c, m in zip(codes.tolist(), multipliers.tolist())]
    logger.info("Loaded %d magnitude codes from %s", len(table), path)
    return table


def load_canonical_events(path: str) -> CanonicalEventList:
    """Load the official event type names (trimmed, uppercased, de-duplicated)."""
    _check_exists(path)
    with open(path, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    names: List[str] = []
    seen = set()
    for line in lines:
        name = line.strip().upper()
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    if not names:
        raise DatasetError(f"No event type names found in {path}")
    logger.info("Loaded %d canonical event types from %s", len(names), path)
    return tuple(names)
