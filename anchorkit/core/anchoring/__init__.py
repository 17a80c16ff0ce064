"""Layered text anchoring: exact, fuzzy and context tiers."""

from anchorkit.core.anchoring.matchers import (
    AnchorMatch,
    AnchorMatcher,
    Candidate,
    ContextMatcher,
    ExactMatcher,
    FuzzyMatcher,
    MatchStrategy,
    default_matchers,
)
from anchorkit.core.anchoring.resolver import AnchorResolver

__all__ = [
    "AnchorMatch",
    "AnchorMatcher",
    "AnchorResolver",
    "Candidate",
    "ContextMatcher",
    "ExactMatcher",
    "FuzzyMatcher",
    "MatchStrategy",
    "default_matchers",
]
