"""
Pitch Review Engine - Main Orchestrator
=======================================
One entry point for both evaluators, selected by ReviewMode:
  load pitch (+ demo) → evaluate → decide → persist → notify → return

Key properties:
- Input errors surface before any side effect
- A run writes all derived fields in one store call, or nothing
- Notification failures are logged and never undo the decision
"""

import logging
import threading
import time
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .errors import MissingPitchIdError, PitchNotFoundError, UnauthorizedError
from .evaluators import DeepLanguageModelEvaluator, Evaluator, ShallowRuleEvaluator
from .models.review_config import ReviewConfig, create_default_review_config
from .models.schemas import EvaluationResult, Pitch, ReviewMode, User
from .services.llm_client import LLMClient
from .services.notifier import LoggingNotificationSender, Notifier
from .services.store import PitchStore
from .services.url_probe import UrlProbe
from .stages.stage1_intake import IntakeGateStage
from .stages.stage2_llm_review import LLMReviewStage
from .stages.stage3_decision import DecisionEngine
from .stages.stage4_deep_analysis import DeepAnalysisStage

log = logging.getLogger(__name__)


class ReviewOutcome(BaseModel):
    """The pitch as written, plus what the evaluator produced"""
    pitch: Pitch
    result: EvaluationResult
    notified: bool = False


class PitchReviewEngine:
    """
    Main engine that orchestrates both review paths.
    """

    def __init__(
        self,
        store: PitchStore,
        llm: Optional[LLMClient] = None,
        probe: Optional[UrlProbe] = None,
        notifier: Optional[Notifier] = None,
        config: Optional[ReviewConfig] = None,
        parallel_gate: bool = False,
    ):
        """
        Initialize the review engine.

        Args:
            store: Pitch persistence (carries the service credential)
            llm: Language-model capability shared by both evaluators
            probe: URL reachability capability
            notifier: Founder notifications
            config: Review rules (uses defaults if not provided)
            parallel_gate: Run the URL probe and shallow LLM review concurrently
        """
        self.store = store
        self.config = config or create_default_review_config()
        self.llm = llm or LLMClient()
        self.notifier = notifier or Notifier(LoggingNotificationSender())

        decision = DecisionEngine(self.config)
        self.evaluators: Dict[ReviewMode, Evaluator] = {
            ReviewMode.FAST_GATE: ShallowRuleEvaluator(
                intake=IntakeGateStage(self.config, probe=probe),
                llm_review=LLMReviewStage(self.llm, self.config),
                decision=decision,
                parallel=parallel_gate,
            ),
            ReviewMode.DEEP_ANALYSIS: DeepLanguageModelEvaluator(
                analysis=DeepAnalysisStage(self.llm),
                decision=decision,
            ),
        }

        self.stats = self._empty_stats()
        self._stats_lock = threading.Lock()

    def review(
        self,
        pitch_id: Optional[str],
        mode: ReviewMode = ReviewMode.FAST_GATE,
        user: Optional[User] = None,
    ) -> ReviewOutcome:
        """
        Evaluate a pitch and persist the decision.

        Args:
            pitch_id: Pitch to review
            mode: Which evaluator to run
            user: Authenticated caller (required for deep analysis)

        Returns:
            ReviewOutcome with the updated pitch and the evaluation result

        Raises:
            UnauthorizedError: deep analysis without a caller
            MissingPitchIdError: no pitch id given
            PitchNotFoundError: unknown pitch id
            AnalysisFailedError: the deep analysis call failed
        """
        start_time = time.time()

        if mode == ReviewMode.DEEP_ANALYSIS and user is None:
            raise UnauthorizedError()
        if not pitch_id:
            raise MissingPitchIdError()

        pitch = self.store.get_pitch(pitch_id)
        if pitch is None:
            raise PitchNotFoundError(pitch_id)

        demo = None
        if mode == ReviewMode.DEEP_ANALYSIS:
            demo = self.store.get_demo_for_pitch(pitch_id)

        self._record("total_processed")
        try:
            result = self.evaluators[mode].evaluate(pitch, demo)
        except Exception:
            self._record("failed")
            raise

        updated = self.store.apply_review(pitch_id, result.to_update())
        self._record(result.status.value)

        notified = self._notify(updated, result, user)

        total_time = (time.time() - start_time) * 1000
        self._record("total_processing_time_ms", total_time)
        log.info(
            "Reviewed pitch %s (%s): status=%s score=%d flags=%s",
            pitch_id,
            mode.value,
            result.status.value,
            result.score,
            result.flags,
        )

        return ReviewOutcome(pitch=updated, result=result, notified=notified)

    def fast_gate(self, pitch_id: Optional[str]) -> ReviewOutcome:
        return self.review(pitch_id, ReviewMode.FAST_GATE)

    def analyze(self, pitch_id: Optional[str], user: Optional[User]) -> ReviewOutcome:
        return self.review(pitch_id, ReviewMode.DEEP_ANALYSIS, user=user)

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics"""
        with self._stats_lock:
            stats = self.stats.copy()
        if stats["total_processed"] > 0:
            stats["approval_rate"] = round(
                stats["approved"] / stats["total_processed"] * 100, 1
            )
            stats["avg_processing_time_ms"] = round(
                stats["total_processing_time_ms"] / stats["total_processed"], 2
            )
        return stats

    def reset_stats(self):
        """Reset engine statistics"""
        with self._stats_lock:
            self.stats = self._empty_stats()

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _record(self, key: str, amount: float = 1):
        # Sync endpoints run in the threadpool and share one engine
        with self._stats_lock:
            self.stats[key] += amount

    def _notify(self, pitch: Pitch, result: EvaluationResult, user: Optional[User]) -> bool:
        """Best-effort delivery; the decision is already written"""
        try:
            if result.mode == ReviewMode.DEEP_ANALYSIS:
                if user is None or result.analysis is None:
                    return False
                return self.notifier.send_analysis_summary(
                    user, pitch, result.analysis, result.status
                )
            return self.notifier.notify_status(pitch, result.status, result.rejection_reason)
        except Exception as e:
            log.warning("Notification for pitch %s failed: %s", pitch.id, e)
            return False

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "total_processed": 0,
            "approved": 0,
            "needs_revision": 0,
            "rejected": 0,
            "pending": 0,
            "failed": 0,
            "total_processing_time_ms": 0,
        }


# =============================================================================
# Convenience Functions
# =============================================================================

def create_engine(
    store: PitchStore,
    llm_api_key: Optional[str] = None,
    llm_provider: Optional[str] = None,
    notifier: Optional[Notifier] = None,
) -> PitchReviewEngine:
    """
    Factory function to create a review engine with the default rules.

    Args:
        store: Pitch persistence
        llm_api_key: API key for the LLM provider
        llm_provider: "openrouter", "openai" or "anthropic"
        notifier: Founder notifications

    Returns:
        Configured PitchReviewEngine instance
    """
    llm = LLMClient(api_key=llm_api_key, provider=llm_provider)
    return PitchReviewEngine(
        store=store,
        llm=llm,
        notifier=notifier,
        config=create_default_review_config(),
    )
