"""DocumentClassifier: decides whether a YAML stream can be rewritten safely.

A stream with several documents may scope each one to a runtime profile.
Renaming keys in one profile document and not the others risks divergent
schemas, so such streams are reported for manual review instead of being
rewritten.  Classification is derived from tree content on every run and
never stored.

Decision policy for a stream of N documents:

- N == 1: rewrite allowed.  A profile-group marker still asks for review.
- N > 1 with a group marker: review, no rewrite.
- N > 1 with a legacy or current selector: review, no rewrite.  The
  escape-hatch switch is inserted only when a legacy selector is present.
- N > 1 with only default documents: rewrite allowed on every document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum, auto

from rule_rewriter.config import ProfileMarkers
from rule_rewriter.errors import PathCollision
from rule_rewriter.result import ChangeLog
from rule_rewriter.tree.nodes import NodeType, TreeNode
from rule_rewriter.tree.paths import PathResolver

__all__ = ["ClassificationDecision", "DocumentClassification", "DocumentClassifier"]

logger = logging.getLogger(__name__)


class DocumentClassification(StrEnum):
    """Per-document profile tag.

    - DEFAULT:         no profile marker
    - PROFILE_LEGACY:  scalar selector at the legacy path
    - PROFILE_CURRENT: selector at the current-syntax path
    - PROFILE_GROUP:   mapping at the profile-group path
    """

    DEFAULT = auto()
    PROFILE_LEGACY = auto()
    PROFILE_CURRENT = auto()
    PROFILE_GROUP = auto()


@dataclass(frozen=True, slots=True)
class ClassificationDecision:
    """What the engine may do with one stream.

    Attributes:
        classifications:     One tag per document, in stream order.
        rewrite_allowed:     The Rule Applier may run.
        requires_review:     The file must be flagged for manual review.
        insert_escape_hatch: The compatibility switch must be added.
        reason:              Human-readable explanation, empty when nothing
                             needs attention.
    """

    classifications: tuple[DocumentClassification, ...]
    rewrite_allowed: bool
    requires_review: bool = False
    insert_escape_hatch: bool = False
    reason: str = ""


_resolver = PathResolver()


class DocumentClassifier:
    """Tags documents by profile marker and applies the stream policy.

    Args:
        markers: Paths of the legacy, current, group and escape-hatch keys.

    Example::
        classifier = DocumentClassifier(ProfileMarkers())
        decision = classifier.decide(roots)
        if decision.insert_escape_hatch:
            classifier.insert_escape_hatch(roots)
    """

    def __init__(self, markers: ProfileMarkers | None = None) -> None:
        self.markers = markers if markers is not None else ProfileMarkers()

    def classify(self, root: TreeNode) -> DocumentClassification:
        group = _resolver.lookup(root, self.markers.group)
        if group is not None and group.is_mapping:
            return DocumentClassification.PROFILE_GROUP
        legacy = _resolver.lookup(root, self.markers.legacy)
        if legacy is not None and legacy.node_type is NodeType.SCALAR:
            return DocumentClassification.PROFILE_LEGACY
        if _resolver.exists(root, self.markers.current):
            return DocumentClassification.PROFILE_CURRENT
        return DocumentClassification.DEFAULT

    def decide(self, roots: list[TreeNode]) -> ClassificationDecision:
        tags = tuple(self.classify(root) for root in roots)
        has_group = DocumentClassification.PROFILE_GROUP in tags
        has_legacy = DocumentClassification.PROFILE_LEGACY in tags
        has_current = DocumentClassification.PROFILE_CURRENT in tags

        if len(roots) <= 1:
            if has_group:
                return ClassificationDecision(
                    tags,
                    rewrite_allowed=True,
                    requires_review=True,
                    reason="profile group definition found; check profile processing order",
                )
            return ClassificationDecision(tags, rewrite_allowed=True)

        if has_group:
            return ClassificationDecision(
                tags,
                rewrite_allowed=False,
                requires_review=True,
                insert_escape_hatch=has_legacy,
                reason=(
                    f"{len(roots)} documents with a profile group definition; "
                    "automatic rewrite suppressed"
                ),
            )
        if has_legacy:
            return ClassificationDecision(
                tags,
                rewrite_allowed=False,
                requires_review=True,
                insert_escape_hatch=True,
                reason=(
                    f"{len(roots)} documents with legacy profile selectors; "
                    f"automatic rewrite suppressed, {self.markers.escape_hatch} added"
                ),
            )
        if has_current:
            return ClassificationDecision(
                tags,
                rewrite_allowed=False,
                requires_review=True,
                reason=(
                    f"{len(roots)} documents with profile selectors; "
                    "automatic rewrite suppressed"
                ),
            )
        return ClassificationDecision(tags, rewrite_allowed=True)

    def insert_escape_hatch(self, roots: list[TreeNode]) -> bool:
        """Set the escape-hatch switch to ``true`` in the first document.

        Returns:
            False when the switch was already ``true`` (nothing changed).

        Raises:
            PathCollision: If a parent of the switch holds a non-mapping value.
        """
        if not roots:
            return False
        first = roots[0]
        node = _resolver.lookup(first, self.markers.escape_hatch)
        if node is not None and node.node_type is NodeType.SCALAR and node.value is True:
            return False
        _resolver.write(first, self.markers.escape_hatch, True)
        return True

    def rewrite_profile_syntax(self, root: TreeNode, file: str, log: ChangeLog) -> bool:
        """Move a scalar legacy selector to the current-syntax path.

        Only scalar selectors move; ``spring.profiles.active`` style mappings
        under the legacy key are left alone.

        Returns:
            True when the document changed.
        """
        legacy = _resolver.lookup(root, self.markers.legacy)
        if legacy is None or legacy.node_type is not NodeType.SCALAR:
            return False
        description = f"{self.markers.legacy} → {self.markers.current}"
        if _resolver.exists(root, self.markers.current):
            log.warn(file, f"{description} skipped: {self.markers.current} already set")
            log.flag_review(file)
            return False

        value = _resolver.remove(root, self.markers.legacy)
        try:
            _resolver.write(root, self.markers.current, value)
        except PathCollision as exc:
            _resolver.write(root, self.markers.legacy, value)
            log.warn(file, f"{description} skipped: {exc}")
            logger.warning("%s: %s", file, exc)
            return False
        log.change(file, description)
        return True
