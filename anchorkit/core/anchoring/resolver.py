"""
Anchor resolver.

Locates the live element for a stored record by running the configured
matchers over the document's candidate elements, strongest tier first.
A record no tier accepts is unresolved: the resolver returns None and
the next reconciliation pass tries again.

Dependencies: bs4, anchorkit.core.anchoring.matchers
System role: Reanchoring engine
"""

import logging

from anchorkit.boundary.dom.page_document import PageDocument
from anchorkit.configs.anchoring import AnchoringSettings, MarkerSettings
from anchorkit.core.anchoring.matchers import AnchorMatch, AnchorMatcher, Candidate, default_matchers
from anchorkit.core.text_hasher import clean_text
from anchorkit.models.annotation import AnnotationRecord
from anchorkit.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class AnchorResolver:
    """
    Layered resolver over a live document.

    Attributes:
        document: Document searched for anchors
        matchers: Ordered matching tiers
        settings: Candidate filtering settings
        marker_attribute: Attribute identifying renderer wrappers
    """

    def __init__(
        self,
        document: PageDocument,
        matchers: list[AnchorMatcher] | None = None,
        settings: AnchoringSettings | None = None,
        marker_attribute: str | None = None,
    ) -> None:
        """
        Initialize resolver.

        Args:
            document: Live document
            matchers: Tiers to run in order (defaults to exact, fuzzy, context)
            settings: Anchoring settings (defaults from environment)
            marker_attribute: Wrapper attribute to exclude from candidates
        """
        self.document = document
        self.settings = settings or AnchoringSettings()
        self.matchers = matchers if matchers is not None else default_matchers(self.settings)
        self.marker_attribute = marker_attribute or MarkerSettings().marker_attribute

    def candidates(self) -> list[Candidate]:
        """
        Elements eligible to anchor a record, in document order.

        Returns:
            list[Candidate]: Configured tags with enough text, wrappers excluded
        """
        result: list[Candidate] = []
        for element in self.document.soup.find_all(self.settings.candidate_tags):
            if element.has_attr(self.marker_attribute):
                continue
            text = clean_text(element.get_text())
            if len(text) <= self.settings.min_candidate_text_length:
                continue
            result.append(Candidate(element, text))
        return result

    def resolve(self, record: AnnotationRecord) -> AnchorMatch | None:
        """
        Locate the live element for ``record``.

        Args:
            record: Stored annotation

        Returns:
            AnchorMatch | None: First accepted match, None when unresolved
        """
        needle = clean_text(record.original_text)
        if not needle:
            log_with_context(logger, logging.DEBUG, "Skipping record with blank text", record_id=record.id)
            return None

        candidates = self.candidates()
        for matcher in self.matchers:
            match = matcher.match(needle, record, candidates)
            if match is None:
                continue
            if matcher.accepts(match.confidence):
                log_with_context(
                    logger,
                    logging.DEBUG,
                    "Record resolved",
                    record_id=record.id,
                    strategy=match.strategy.value,
                    confidence=round(match.confidence, 3),
                )
                return match
            log_with_context(
                logger,
                logging.DEBUG,
                "Best proposal below threshold",
                record_id=record.id,
                strategy=match.strategy.value,
                confidence=round(match.confidence, 3),
                threshold=matcher.threshold,
            )

        log_with_context(
            logger,
            logging.DEBUG,
            "Record unresolved",
            record_id=record.id,
            candidates=len(candidates),
        )
        return None
