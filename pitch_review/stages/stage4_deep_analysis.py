"""
Stage 4: Deep Analysis
======================
Detailed language-model evaluation that produces founder-facing feedback:
sub-scores (clarity, completeness, market fit, demo effectiveness),
strengths, improvements, description rewrites, red flags and a personal
message.

Unlike the shallow review this stage has no fallback. Its output is the
decision, so any failure is raised as AnalysisFailedError.
"""

import logging
import time
from typing import Optional

from ..errors import AnalysisFailedError
from ..models.schemas import DeepAnalysis, Demo, Pitch
from ..services.llm_client import LLMClient

log = logging.getLogger(__name__)

_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

DEEP_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "overall_score": {"type": "number"},
        "clarity_score": {"type": "number"},
        "completeness_score": {"type": "number"},
        "market_fit_score": {"type": "number"},
        "demo_effectiveness_score": {"type": "number"},
        "demo_feedback": _STRING_ARRAY,
        "pitch_description_improvements": _STRING_ARRAY,
        "strengths": _STRING_ARRAY,
        "improvements": _STRING_ARRAY,
        "suggested_category": {"type": "string"},
        "red_flags": _STRING_ARRAY,
        "recommendation": {"type": "string", "enum": ["approve", "needs_revision", "reject"]},
        "message_to_founder": {"type": "string"},
    },
    "required": ["overall_score", "strengths", "improvements", "red_flags", "message_to_founder"],
}


class DeepAnalysisStage:
    """
    Stage 4: Comprehensive pitch analysis.
    """

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or LLMClient()

    def process(self, pitch: Pitch, demo: Optional[Demo] = None) -> DeepAnalysis:
        """
        Analyze a pitch and its optional demo.

        Args:
            pitch: Pitch to analyze
            demo: Demo attached to the pitch, if any

        Returns:
            DeepAnalysis parsed from the model answer

        Raises:
            AnalysisFailedError: the model call failed or the answer was unusable
        """
        start_time = time.time()
        prompt = self._generate_prompt(pitch, demo)

        try:
            data = self.llm.evaluate(prompt, DEEP_ANALYSIS_SCHEMA)
            analysis = DeepAnalysis.model_validate(data)
        except Exception as e:
            raise AnalysisFailedError(f"Deep analysis failed for pitch {pitch.id}: {e}") from e

        if demo is None:
            analysis.demo_effectiveness_score = 0

        log.info(
            "Deep analysis for pitch %s: score=%s red_flags=%d (%.0fms)",
            pitch.id,
            analysis.overall_score,
            len(analysis.red_flags),
            (time.time() - start_time) * 1000,
        )
        return analysis

    def _generate_prompt(self, pitch: Pitch, demo: Optional[Demo]) -> str:
        """Generate the analysis prompt with all submission fields"""

        pitch_context = f"""
Pitch Information:
- Startup Name: {pitch.startup_name}
- One-Liner: {pitch.one_liner}
- Category: {pitch.category or 'Not specified'}
- Problem Statement: {pitch.what_problem_do_you_solve or 'Not provided'}
- Product URL: {pitch.product_url or 'Not provided'}
- Product Stage: {pitch.product_stage or 'Not specified'}
- Product Live: {'Yes' if pitch.is_product_live else 'No'}
- Demo Video: {'Provided' if demo else 'Not provided'}
"""

        if demo:
            demo_section = """
DEMO VIDEO ANALYSIS:
Based on the presence of a demo video, evaluate:
- Does the pitch indicate the demo will show actual product functionality?
- Is there evidence of user-facing features vs just concepts?
- Does the pitch suggest a walkthrough of real use cases?
"""
            demo_items = (
                "5. Demo effectiveness score (1-10) - Expected demo quality\n"
                "6. Demo feedback (2-3 specific suggestions for the demo)"
            )
        else:
            demo_section = ""
            demo_items = "5. Demo feedback (note that demo is missing)"

        return f"""You are an expert startup pitch reviewer with deep knowledge of what makes startups succeed. Analyze this pitch submission comprehensively.
{pitch_context}
SUCCESS FACTORS TO EVALUATE:
1. Problem-Solution Fit: Is the problem real, painful, and widespread?
2. Value Proposition: Is the benefit clear and compelling?
3. Market Opportunity: Does the market size justify the effort?
4. Differentiation: What makes this unique or better?
5. Traction Indicators: Evidence of validation or momentum?
6. Team Credibility: Does the pitch convey expertise?

PITCH DESCRIPTION ANALYSIS:
Evaluate the one-liner and problem statement for:
- Clarity: Is it immediately understandable?
- Specificity: Does it avoid vague buzzwords?
- Impact: Does it convey why this matters?
- Actionability: Can you visualize the solution?
{demo_section}
Provide detailed analysis with:
1. Overall quality score (1-100)
2. Clarity score (1-10) - How clear and understandable
3. Completeness score (1-10) - Coverage of key information
4. Market fit score (1-10) - Problem/solution alignment
{demo_items}
7. Pitch description improvements (3-5 specific rewrites or enhancements for the one-liner and problem statement)
8. Strengths (3-5 bullet points)
9. Areas for improvement (3-5 actionable items)
10. Suggested category if current doesn't fit
11. Red flags or concerns
12. Overall recommendation (approve, needs_revision, reject)
13. Personalized message to founder (encouraging, specific, actionable)

Be constructive, reference specific startup success patterns, and provide concrete examples."""
