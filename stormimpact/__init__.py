"""
Storm Impact Ranker
===================

This package ranks weather event types by their human and economic impact.

- The CLI entry point is in `stormimpact/cli.py`.
- The stage-by-stage pipeline is wired together in `stormimpact/engine.py`.
- Dataset loading is in `stormimpact/loader.py`.
- Label cleaning and fuzzy matching is in `stormimpact/normalizer.py`.
"""

__version__ = '0.1.0'
