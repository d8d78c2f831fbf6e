"""
Pipeline configuration
======================

All knobs for one run live in `PipelineConfig`. The CLI fills it from
command line arguments; tests build it directly.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Optional

DEFAULT_CUTOFF_YEAR = 1996
DEFAULT_TOP_N = 10
DEFAULT_MAX_DISTANCE = 2
DEFAULT_DATE_FORMAT = "%m/%d/%Y %H:%M:%S"
MISSING_POLICIES = ("propagate", "zero")


@dataclass
class PipelineConfig:
    """Input paths and analysis knobs for a single batch run."""
    events_path: Optional[str] = None
    codes_path: Optional[str] = None
    event_types_path: Optional[str] = None

    # Years before this have sparse event type coverage
    cutoff_year: int = DEFAULT_CUTOFF_YEAR

    # How many event types each ranking keeps
    top_n: int = DEFAULT_TOP_N

    # Largest edit distance still accepted as a fuzzy match
    max_distance: int = DEFAULT_MAX_DISTANCE

    # How undefined damage values enter group sums: "propagate" or "zero"
    missing_policy: str = "propagate"

    date_format: str = DEFAULT_DATE_FORMAT

    def validate(self) -> None:
        if self.top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {self.top_n}")
        if self.max_distance < 0:
            raise ValueError(f"max_distance must be >= 0, got {self.max_distance}")
        if self.missing_policy not in MISSING_POLICIES:
            raise ValueError(f"missing_policy must be one of {MISSING_POLICIES}, got {self.missing_policy!r}")

    def require_paths(self) -> None:
        missing = [name for name in ("events_path", "codes_path", "event_types_path")
                   if not getattr(self, name)]
        if missing:
            raise ValueError(f"Missing input path(s): {', '.join(missing)}")


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; INFO when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
