# Review stages module
from .stage1_intake import IntakeGateStage
from .stage2_llm_review import LLMReviewStage
from .stage3_decision import DecisionEngine, clamp_score
from .stage4_deep_analysis import DeepAnalysisStage
