"""
Stage 2: Language-Model Review
==============================
Advisory qualitative pass that catches red flags the deterministic rules
miss: fraud framing, offensive content, vague or unrealistic claims.

The language model is not a hard dependency. Any failure (transport,
malformed JSON, unexpected shape) awards partial credit and the run
continues.
"""

import logging
import time
from typing import Optional

from ..models.schemas import LLMReviewResult, Pitch, Recommendation, ShallowReview
from ..models.review_config import GatePoints, ReviewConfig
from ..services.llm_client import LLMClient

log = logging.getLogger(__name__)

SHALLOW_REVIEW_SCHEMA = {
    "type": "object",
    "properties": {
        "has_red_flags": {"type": "boolean"},
        "concerns": {"type": "array", "items": {"type": "string"}},
        "recommendation": {"type": "string", "enum": ["approve", "review", "reject"]},
    },
    "required": ["has_red_flags", "concerns", "recommendation"],
}


class LLMReviewStage:
    """
    Stage 2: Ask the language model for red flags.
    """

    def __init__(self, llm: Optional[LLMClient] = None, config: Optional[ReviewConfig] = None):
        self.llm = llm or LLMClient()
        self.points: GatePoints = (config or ReviewConfig()).intake.points

    def process(self, pitch: Pitch) -> LLMReviewResult:
        """
        Review a pitch with the language model.

        Args:
            pitch: Pitch to review

        Returns:
            LLMReviewResult with score contribution and extra flags
        """
        start_time = time.time()

        try:
            data = self.llm.evaluate(self._generate_prompt(pitch), SHALLOW_REVIEW_SCHEMA)
            review = ShallowReview.model_validate(data)
        except Exception as e:
            log.warning("AI review failed for pitch %s: %s", pitch.id, e)
            return LLMReviewResult(
                succeeded=False,
                score_delta=self.points.llm_unavailable,
                processing_time_ms=self._elapsed(start_time),
            )

        result = LLMReviewResult(
            succeeded=True,
            review=review,
            processing_time_ms=self._elapsed(start_time),
        )

        if review.has_red_flags:
            result.flags = [c for c in review.concerns if c and c.strip()]
            if review.recommendation == Recommendation.REJECT:
                result.clears_auto_approve = True
                result.score_delta = self.points.llm_reject_penalty
        else:
            result.score_delta = self.points.llm_clean

        return result

    def _generate_prompt(self, pitch: Pitch) -> str:
        return f"""Review this startup pitch submission and identify any red flags:

Startup Name: {pitch.startup_name}
One-liner: {pitch.one_liner}
Problem Description: {pitch.what_problem_do_you_solve or 'Not provided'}
Category: {pitch.category or 'Not provided'}

Check for:
1. Scam/fraud indicators
2. Offensive or inappropriate content
3. Spam patterns
4. Vague or meaningless descriptions
5. Unrealistic claims without substance

Respond with JSON indicating if the submission should be flagged."""

    @staticmethod
    def _elapsed(start_time: float) -> float:
        return round((time.time() - start_time) * 1000, 2)
