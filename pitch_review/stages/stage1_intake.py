"""
Stage 1: Intake Gate
====================
Cheap deterministic checks that penalize or block structurally invalid
submissions before any language-model call.

Checks:
- Product URL reachability (HEAD probe) and social-media host
- Product liveness
- Field completeness
- Problem statement depth
- Category specificity
- Scam / hype / non-product keywords
- Shouting (excessive caps)

Probe failures are converted to flags; this stage always returns a result.
"""

import logging
import math
import time
from typing import List, Optional

from ..models.schemas import IntakeResult, Pitch, ProbeOutcome
from ..models.review_config import IntakeRules, ReviewConfig
from ..services.url_probe import UrlProbe

log = logging.getLogger(__name__)


class IntakeGateStage:
    """
    Stage 1: Score a pitch with deterministic rules.
    """

    def __init__(self, config: Optional[ReviewConfig] = None, probe: Optional[UrlProbe] = None):
        """
        Initialize with review configuration or use defaults.
        """
        self.rules: IntakeRules = (config or ReviewConfig()).intake
        self.probe = probe or UrlProbe()

    def process(self, pitch: Pitch) -> IntakeResult:
        """
        Run every intake check on a pitch.

        Args:
            pitch: Pitch to check

        Returns:
            IntakeResult with the score contribution, flags and
            auto-approve eligibility
        """
        start_time = time.time()
        result = IntakeResult()

        self._check_product_url(pitch, result)
        self._check_liveness(pitch, result)
        self._check_completeness(pitch, result)
        self._check_problem_depth(pitch, result)
        self._check_category(pitch, result)
        self._check_keywords(pitch, result)
        self._check_caps(pitch, result)

        result.processing_time_ms = round((time.time() - start_time) * 1000, 2)
        return result

    def _check_product_url(self, pitch: Pitch, result: IntakeResult):
        """Probe the product URL"""
        points = self.rules.points
        try:
            probe = self.probe.probe(pitch.product_url)
        except Exception as e:
            log.warning("URL probe raised for pitch %s: %s", pitch.id, e)
            self._flag(result, "product_url_not_accessible", block=True)
            return
        result.probe = probe

        if probe.outcome == ProbeOutcome.MISSING:
            self._flag(result, "no_product_url", block=True)
            return

        if probe.outcome == ProbeOutcome.MALFORMED:
            self._flag(result, "invalid_product_url", block=True)
            return

        if probe.outcome == ProbeOutcome.REACHABLE:
            result.score_delta += points.url_reachable
        else:
            self._flag(result, "product_url_not_accessible", block=True)

        if probe.responded and self._is_social_media_host(probe.host):
            self._flag(result, "social_media_url")
            result.score_delta += points.social_media_penalty

    def _check_liveness(self, pitch: Pitch, result: IntakeResult):
        """Check is_product_live"""
        if pitch.is_product_live:
            result.score_delta += self.rules.points.product_live
        else:
            self._flag(result, "product_not_live", block=True)

    def _check_completeness(self, pitch: Pitch, result: IntakeResult):
        """Award points in proportion to required fields filled in"""
        required = self.rules.required_fields
        if not required:
            return

        completed = 0
        for field in required:
            value = getattr(pitch, field, None)
            if value is not None and str(value).strip():
                completed += 1

        result.completed_fields = completed
        result.score_delta += math.floor(
            self.rules.points.completeness_max * completed / len(required)
        )

    def _check_problem_depth(self, pitch: Pitch, result: IntakeResult):
        """Check problem statement length"""
        problem = pitch.what_problem_do_you_solve or ""
        if len(problem) >= self.rules.min_problem_length:
            result.score_delta += self.rules.points.problem_depth
        else:
            self._flag(result, "problem_description_too_short")

    def _check_category(self, pitch: Pitch, result: IntakeResult):
        """Reward a specific category"""
        category = (pitch.category or "").strip()
        if category and category != self.rules.generic_category:
            result.score_delta += self.rules.points.specific_category

    def _check_keywords(self, pitch: Pitch, result: IntakeResult):
        """Case-insensitive substring match against the keyword lists"""
        text = self._get_searchable_text(pitch).lower()
        keywords = self.rules.keywords
        points = self.rules.points

        if self._contains_any(text, keywords.scam):
            self._flag(result, "scam_indicators", block=True)
            result.score_delta += points.scam_penalty

        if self._contains_any(text, keywords.hype):
            self._flag(result, "vague_description")
            result.score_delta += points.hype_penalty

        if self._contains_any(text, keywords.non_product):
            self._flag(result, "not_a_startup_product", block=True)

    def _check_caps(self, pitch: Pitch, result: IntakeResult):
        """Flag pitches written mostly in capitals"""
        words = self._get_searchable_text(pitch).split()
        if not words:
            return

        caps_words = [
            w for w in words
            if len(w) > self.rules.caps_min_word_length and w.isupper()
        ]
        if len(caps_words) > len(words) * self.rules.caps_ratio_limit:
            self._flag(result, "excessive_caps")
            result.score_delta += self.rules.points.caps_penalty

    def _is_social_media_host(self, host: Optional[str]) -> bool:
        if not host:
            return False
        host = host.lower()
        if host.startswith("www."):
            host = host[4:]
        return any(
            host == domain or host.endswith("." + domain)
            for domain in self.rules.social_media_domains
        )

    def _get_searchable_text(self, pitch: Pitch) -> str:
        """Combine name, one-liner and problem statement"""
        parts = [
            pitch.startup_name or "",
            pitch.one_liner or "",
            pitch.what_problem_do_you_solve or "",
        ]
        return " ".join(p for p in parts if p)

    @staticmethod
    def _contains_any(text: str, keywords: List[str]) -> bool:
        return any(keyword.lower() in text for keyword in keywords)

    @staticmethod
    def _flag(result: IntakeResult, flag: str, block: bool = False):
        if flag not in result.flags:
            result.flags.append(flag)
        if block:
            result.auto_approve_eligible = False
