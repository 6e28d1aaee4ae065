"""
Stage 3: Decision Engine
========================
Turns accumulated signals into a publication status.

Fast gate rule (first match wins):
  1. score >= 70, auto-approve eligible, no flags -> approved
  2. score < 40 or not eligible                    -> rejected (+ reason)
  3. otherwise                                     -> needs_revision

Deep analysis rule (first match wins):
  1. overall >= 75 and no red flags  -> approved
  2. overall >= 50                   -> needs_revision
  3. > 2 red flags or overall < 40   -> rejected
  4. otherwise                       -> pending

Every Decision satisfies: is_published iff approved, rejection_reason set
iff rejected.
"""

from typing import Iterable, Optional, Sequence

from ..models.schemas import Decision, ReviewStatus
from ..models.review_config import ReviewConfig


def bound_score(value: float) -> float:
    """Clamp a score into [0, 100] without rounding"""
    return max(0.0, min(100.0, float(value)))


def clamp_score(value: float) -> int:
    """Round and clamp a score into [0, 100]"""
    return max(0, min(100, int(round(value))))


class DecisionEngine:
    """
    Stage 3: Apply the status rules.
    """

    def __init__(self, config: Optional[ReviewConfig] = None):
        self.config = config or ReviewConfig()

    def select_rejection_reason(self, flags: Iterable[str]) -> str:
        """Pick the message of the first priority rule any flag matches"""
        present = set(flags)
        for rule in self.config.rejection_rules:
            if present.intersection(rule.flags):
                return rule.reason
        return self.config.default_rejection_reason

    def decide_gate(
        self,
        score: float,
        auto_approve_eligible: bool,
        flags: Sequence[str],
    ) -> Decision:
        """Fast gate status"""
        thresholds = self.config.gate_thresholds
        score = clamp_score(score)

        if score >= thresholds.approve_min and auto_approve_eligible and not flags:
            return self._build(ReviewStatus.APPROVED)

        if score < thresholds.reject_below or not auto_approve_eligible:
            return self._build(ReviewStatus.REJECTED, self.select_rejection_reason(flags))

        return self._build(ReviewStatus.NEEDS_REVISION)

    def decide_deep(self, overall_score: float, red_flags: Sequence[str]) -> Decision:
        """Deep analysis status"""
        thresholds = self.config.deep_thresholds
        # Thresholds compare the raw score; only the stored value is rounded
        score = bound_score(overall_score)
        red_flag_count = len(red_flags)

        if score >= thresholds.approve_min and red_flag_count == 0:
            return self._build(ReviewStatus.APPROVED)

        if score >= thresholds.revision_min:
            return self._build(ReviewStatus.NEEDS_REVISION)

        if red_flag_count > thresholds.max_red_flags or score < thresholds.reject_below:
            # Feedback arrays explain the rejection; the stored reason only
            # has to be present
            return self._build(ReviewStatus.REJECTED, self.select_rejection_reason(red_flags))

        return self._build(ReviewStatus.PENDING)

    @staticmethod
    def _build(status: ReviewStatus, reason: Optional[str] = None) -> Decision:
        if status == ReviewStatus.REJECTED:
            return Decision(status=status, is_published=False, rejection_reason=reason)
        return Decision(
            status=status,
            is_published=status == ReviewStatus.APPROVED,
            rejection_reason=None,
        )
