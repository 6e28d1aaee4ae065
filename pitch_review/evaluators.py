"""
Evaluators
==========
Two strategies behind one interface: input a pitch and its optional demo,
output an EvaluationResult ready to be written to the pitch.

- ShallowRuleEvaluator: intake gate + advisory LLM review + gate decision
- DeepLanguageModelEvaluator: deep LLM analysis + deep decision
"""

import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .models.schemas import (
    Demo,
    EvaluationResult,
    IntakeResult,
    LLMReviewResult,
    Pitch,
    ReviewMode,
    ReviewNotes,
    utcnow,
)
from .stages.stage1_intake import IntakeGateStage
from .stages.stage2_llm_review import LLMReviewStage
from .stages.stage3_decision import DecisionEngine, clamp_score
from .stages.stage4_deep_analysis import DeepAnalysisStage


class Evaluator(ABC):
    """Shared evaluator interface"""

    mode: ReviewMode

    @abstractmethod
    def evaluate(self, pitch: Pitch, demo: Optional[Demo] = None) -> EvaluationResult:
        ...


class ShallowRuleEvaluator(Evaluator):
    """
    Fast gate: deterministic checks plus an advisory language-model pass.
    """

    mode = ReviewMode.FAST_GATE

    def __init__(
        self,
        intake: IntakeGateStage,
        llm_review: LLMReviewStage,
        decision: DecisionEngine,
        parallel: bool = False,
    ):
        """
        Args:
            intake: Stage 1
            llm_review: Stage 2
            decision: Stage 3
            parallel: run the URL probe and the LLM review concurrently
        """
        self.intake = intake
        self.llm_review = llm_review
        self.decision = decision
        self.parallel = parallel

    def evaluate(self, pitch: Pitch, demo: Optional[Demo] = None) -> EvaluationResult:
        start_time = time.time()

        if self.parallel:
            with ThreadPoolExecutor(max_workers=2) as executor:
                intake_future = executor.submit(self.intake.process, pitch)
                review_future = executor.submit(self.llm_review.process, pitch)
                intake_result = intake_future.result()
                review_result = review_future.result()
        else:
            intake_result = self.intake.process(pitch)
            review_result = self.llm_review.process(pitch)

        return self._merge(intake_result, review_result, start_time)

    def _merge(
        self,
        intake: IntakeResult,
        review: LLMReviewResult,
        start_time: float,
    ) -> EvaluationResult:
        flags: List[str] = list(intake.flags)
        for flag in review.flags:
            if flag not in flags:
                flags.append(flag)

        eligible = intake.auto_approve_eligible and not review.clears_auto_approve
        score = clamp_score(intake.score_delta + review.score_delta)
        decision = self.decision.decide_gate(score, eligible, flags)

        notes = ReviewNotes(
            summary=(
                f"Auto-review completed. Score: {score}/100. "
                f"Flags: {', '.join(flags) or 'None'}"
            ),
            red_flags=list(review.flags),
            ai_analyzed=review.succeeded,
            analyzed_at=utcnow(),
        )

        return EvaluationResult(
            mode=self.mode,
            score=score,
            flags=flags,
            status=decision.status,
            is_published=decision.is_published,
            rejection_reason=decision.rejection_reason,
            review_notes=notes,
            auto_approve_eligible=eligible,
            processing_time_ms=round((time.time() - start_time) * 1000, 2),
        )


class DeepLanguageModelEvaluator(Evaluator):
    """
    Deep analysis: the language model scores the pitch and writes feedback.
    """

    mode = ReviewMode.DEEP_ANALYSIS

    def __init__(self, analysis: DeepAnalysisStage, decision: DecisionEngine):
        self.analysis = analysis
        self.decision = decision

    def evaluate(self, pitch: Pitch, demo: Optional[Demo] = None) -> EvaluationResult:
        start_time = time.time()

        # Raises AnalysisFailedError; nothing has been written yet
        analysis = self.analysis.process(pitch, demo)

        red_flags = [f for f in analysis.red_flags if f and f.strip()]
        score = clamp_score(analysis.overall_score)
        decision = self.decision.decide_deep(analysis.overall_score, red_flags)

        notes = ReviewNotes(
            clarity_score=analysis.clarity_score,
            completeness_score=analysis.completeness_score,
            market_fit_score=analysis.market_fit_score,
            demo_effectiveness_score=analysis.demo_effectiveness_score or 0,
            demo_feedback=analysis.demo_feedback,
            pitch_description_improvements=analysis.pitch_description_improvements,
            strengths=analysis.strengths,
            improvements=analysis.improvements,
            red_flags=red_flags,
            message=analysis.message_to_founder,
            ai_analyzed=True,
            analyzed_at=utcnow(),
        )

        return EvaluationResult(
            mode=self.mode,
            score=score,
            flags=red_flags,
            status=decision.status,
            is_published=decision.is_published,
            rejection_reason=decision.rejection_reason,
            review_notes=notes,
            analysis=analysis,
            processing_time_ms=round((time.time() - start_time) * 1000, 2),
        )
