"""
Anchor matching strategies.

Each matcher scores the candidate elements of a document against a
record's text and proposes its best element. The resolver runs them in
order and keeps the first proposal the proposing matcher accepts.

Dependencies: bs4, anchorkit.core.similarity
System role: Tiers of the anchor resolver
"""

import enum
from dataclasses import dataclass

from bs4 import PageElement, Tag

from anchorkit.configs.anchoring import AnchoringSettings
from anchorkit.core.similarity import length_ratio, similarity
from anchorkit.core.text_hasher import clean_text
from anchorkit.models.annotation import AnnotationRecord


class MatchStrategy(str, enum.Enum):
    """Tier that produced a match."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    CONTEXT = "context"


@dataclass(frozen=True)
class AnchorMatch:
    """A live element believed to hold a record's text."""

    element: Tag
    confidence: float
    strategy: MatchStrategy


@dataclass(frozen=True)
class Candidate:
    """An element eligible to anchor a record, with its normalized text."""

    element: Tag
    text: str


def is_descendant(node: PageElement, ancestor: PageElement) -> bool:
    """Whether ``node`` sits strictly inside ``ancestor``."""
    return any(parent is ancestor for parent in node.parents)


def _pick_best(scored: list[tuple[float, Candidate]]) -> tuple[float, Candidate] | None:
    # Candidates arrive in document order, so an equal-scoring descendant
    # always follows its ancestor.
    best: tuple[float, Candidate] | None = None
    for score, candidate in scored:
        if best is None or score > best[0]:
            best = (score, candidate)
        elif score == best[0] and is_descendant(candidate.element, best[1].element):
            best = (score, candidate)
    return best


class AnchorMatcher:
    """
    Base matching strategy.

    Attributes:
        strategy: Tag reported on matches
        threshold: Score a proposal must exceed to be accepted
    """

    strategy: MatchStrategy

    def __init__(self, threshold: float) -> None:
        self.threshold = threshold

    def accepts(self, score: float) -> bool:
        """Whether a proposal with ``score`` clears this tier."""
        return score > self.threshold

    def match(
        self,
        needle: str,
        record: AnnotationRecord,
        candidates: list[Candidate],
    ) -> AnchorMatch | None:
        """
        Propose the best candidate for ``record``.

        Args:
            needle: Cleaned original text of the record
            record: Record being anchored
            candidates: Eligible elements in document order

        Returns:
            AnchorMatch | None: Best proposal, possibly below threshold
        """
        raise NotImplementedError


class ExactMatcher(AnchorMatcher):
    """Literal containment of the record text; confidence is always 1.0."""

    strategy = MatchStrategy.EXACT

    def __init__(self) -> None:
        super().__init__(threshold=1.0)

    def accepts(self, score: float) -> bool:
        return score >= self.threshold

    def match(
        self,
        needle: str,
        record: AnnotationRecord,
        candidates: list[Candidate],
    ) -> AnchorMatch | None:
        containing = [c for c in candidates if needle in c.text]
        for candidate in containing:
            dominated = any(
                other is not candidate and is_descendant(other.element, candidate.element)
                for other in containing
            )
            if not dominated:
                return AnchorMatch(candidate.element, 1.0, self.strategy)
        return None


class FuzzyMatcher(AnchorMatcher):
    """
    Edit-distance similarity between the record text and a whole candidate.

    Candidates shorter than ``min_length_ratio`` of the needle are never
    scored, nor are those whose length ratio already rules out clearing
    the threshold.
    """

    strategy = MatchStrategy.FUZZY

    def __init__(self, threshold: float = 0.7, min_length_ratio: float = 0.5) -> None:
        super().__init__(threshold)
        self.min_length_ratio = min_length_ratio

    def match(
        self,
        needle: str,
        record: AnnotationRecord,
        candidates: list[Candidate],
    ) -> AnchorMatch | None:
        min_length = self.min_length_ratio * len(needle)
        scored = [
            (similarity(needle, candidate.text), candidate)
            for candidate in candidates
            if len(candidate.text) >= min_length
            and length_ratio(needle, candidate.text) > self.threshold
        ]
        best = _pick_best(scored)
        if best is None:
            return None
        return AnchorMatch(best[1].element, best[0], self.strategy)


class ContextMatcher(AnchorMatcher):
    """
    Scores candidates holding every captured context fragment against the
    text reassembled as ``before original after``.
    """

    strategy = MatchStrategy.CONTEXT

    def __init__(self, threshold: float = 0.6) -> None:
        super().__init__(threshold)

    def match(
        self,
        needle: str,
        record: AnnotationRecord,
        candidates: list[Candidate],
    ) -> AnchorMatch | None:
        before = clean_text(record.context.before)
        after = clean_text(record.context.after)
        fragments = [fragment for fragment in (before, after) if fragment]
        if not fragments:
            return None

        combined = clean_text(f"{before} {needle} {after}")
        scored = [
            (similarity(combined, candidate.text), candidate)
            for candidate in candidates
            if all(fragment in candidate.text for fragment in fragments)
            and length_ratio(combined, candidate.text) > self.threshold
        ]
        best = _pick_best(scored)
        if best is None:
            return None
        return AnchorMatch(best[1].element, best[0], self.strategy)


def default_matchers(settings: AnchoringSettings | None = None) -> list[AnchorMatcher]:
    """Exact, then fuzzy, then context, tuned from ``settings``."""
    settings = settings or AnchoringSettings()
    return [
        ExactMatcher(),
        FuzzyMatcher(settings.fuzzy_threshold, settings.min_length_ratio),
        ContextMatcher(settings.context_threshold),
    ]
