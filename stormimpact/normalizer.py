"""
Event type normalizer
=====================

Free-text event labels ("TSTM WIND", "RIVER FLOODING", "Hurricane Opal")
are mapped onto the official event type list in two phases:

1) Rewrite rules: an ordered chain of substring rules folded over the
   cleaned (uppercased, trimmed) label. Each rule sees the output of the
   rule before it, so "TSTM WIND" first becomes "THUNDERSTORM WIND" and
   then matches the thunderstorm wind rule.
2) Fuzzy match: the rewritten label is matched against the official list
   by edit distance. Labels with no close enough candidate keep their
   rewritten text and are reported as unmatched.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field, replace
from functools import reduce
import logging
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from rapidfuzz import process
from rapidfuzz.distance import OSA

from .config import DEFAULT_MAX_DISTANCE
from .models import CanonicalEventList, EventRecord

logger = logging.getLogger(__name__)


def clean_label(raw: object) -> str:
    """Uppercase and trim a raw label."""
    return str(raw).strip().upper()


@dataclass(frozen=True)
class RewriteRule:
    """Rewrite a label when it contains any of `substrings`."""
    name: str
    substrings: Tuple[str, ...]
    rewrite: Callable[[str], str]

    def applies(self, label: str) -> bool:
        return any(s in label for s in self.substrings)

    def __call__(self, label: str) -> str:
        return self.rewrite(label) if self.applies(label) else label


def _whole(target: str) -> Callable[[str], str]:
    return lambda _label: target


# Order matters: the TSTM expansion feeds the thunderstorm wind rule.
REWRITE_RULES: Tuple[RewriteRule, ...] = (
    RewriteRule("tstm", ("TSTM",), lambda s: s.replace("TSTM", "THUNDERSTORM")),
    RewriteRule("thunderstorm_wind", ("THUNDERSTORM WIND",), _whole("THUNDERSTORM WIND")),
    RewriteRule("winter", ("WINTER",), _whole("WINTER WEATHER")),
    RewriteRule("flood", ("FLD", "FLOOD"), _whole("FLOOD")),
    RewriteRule("hurricane", ("HURRICANE",), _whole("HURRICANE (TYPHOON)")),
    RewriteRule("fire", ("FIRE",), _whole("WILDFIRE")),
)


def rewrite_label(label: str, rules: Sequence[RewriteRule] = REWRITE_RULES) -> str:
    """Clean `label` and fold every rule over it in order."""
    return reduce(lambda acc, rule: rule(acc), rules, clean_label(label))


class LabelMatcher(Protocol):
    def match(self, label: str, candidates: Sequence[str]) -> Optional[str]:
        ...


@dataclass
class EditDistanceMatcher:
    """Closest candidate by optimal string alignment distance.

    Returns None when every candidate is more than `max_distance` edits away.
    """
    max_distance: int = DEFAULT_MAX_DISTANCE

    def match(self, label: str, candidates: Sequence[str]) -> Optional[str]:
        if not candidates:
            return None
        hit = process.extractOne(label, candidates, scorer=OSA.distance,
                                 processor=None, score_cutoff=self.max_distance)
        if hit is None:
            return None
        choice, _distance, _index = hit
        return choice


@dataclass
class NormalizationOutcome:
    events: List[EventRecord]
    # rewritten label -> number of records that matched nothing
    unmatched: Counter = field(default_factory=Counter)

    @property
    def unmatched_count(self) -> int:
        return sum(self.unmatched.values())


@dataclass
class Normalizer:
    """Turns raw labels into canonical event types.

    Results are cached per raw label; a full storm dataset has only a few
    hundred distinct spellings.
    """
    canonical: CanonicalEventList
    matcher: LabelMatcher = field(default_factory=EditDistanceMatcher)
    rules: Sequence[RewriteRule] = REWRITE_RULES
    _cache: Dict[str, Tuple[str, bool]] = field(default_factory=dict, init=False, repr=False)

    def canonicalize(self, label: str) -> Tuple[str, bool]:
        """Return (canonical type, matched). Unmatched labels keep their rewritten text."""
        cached = self._cache.get(label)
        if cached is not None:
            return cached
        rewritten = rewrite_label(label, self.rules)
        hit = self.matcher.match(rewritten, self.canonical)
        result = (hit, True) if hit is not None else (rewritten, False)
        self._cache[label] = result
        return result

    def normalize(self, events: List[EventRecord]) -> NormalizationOutcome:
        out = NormalizationOutcome(events=[])
        for e in events:
            canonical_type, matched = self.canonicalize(e.event_type)
            if not matched:
                out.unmatched[canonical_type] += 1
            out.events.append(replace(e, canonical_type=canonical_type, matched=matched))

        if out.unmatched:
            share = 100.0 * out.unmatched_count / len(events)
            logger.warning("%d events (%.2f%%) across %d labels matched no official event type",
                           out.unmatched_count, share, len(out.unmatched))
        logger.info("Normalized %d events into %d event types",
                    len(events), len({e.canonical_type for e in out.events}))
        return out
