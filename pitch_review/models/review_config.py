"""
Review Configuration Models
"""

from typing import List, Optional, Tuple
from pydantic import BaseModel, Field
from datetime import datetime
import uuid

from ..config.settings import (
    CAPS_MIN_WORD_LENGTH,
    CAPS_RATIO_LIMIT,
    DEEP_THRESHOLDS,
    DEFAULT_REJECTION_REASON,
    GATE_POINTS,
    GATE_THRESHOLDS,
    GENERIC_CATEGORY,
    KEYWORD_LISTS,
    MIN_PROBLEM_LENGTH,
    REJECTION_REASONS,
    REQUIRED_FIELDS,
    SOCIAL_MEDIA_DOMAINS,
)
from .schemas import utcnow


class KeywordLists(BaseModel):
    """Lexical heuristics for Stage 1"""
    scam: List[str] = Field(default_factory=lambda: list(KEYWORD_LISTS["scam"]))
    hype: List[str] = Field(default_factory=lambda: list(KEYWORD_LISTS["hype"]))
    non_product: List[str] = Field(default_factory=lambda: list(KEYWORD_LISTS["non_product"]))


class GatePoints(BaseModel):
    """Score contributions awarded or deducted by the gate"""
    url_reachable: int = GATE_POINTS["url_reachable"]
    social_media_penalty: int = GATE_POINTS["social_media_penalty"]
    product_live: int = GATE_POINTS["product_live"]
    completeness_max: int = GATE_POINTS["completeness_max"]
    problem_depth: int = GATE_POINTS["problem_depth"]
    specific_category: int = GATE_POINTS["specific_category"]
    scam_penalty: int = GATE_POINTS["scam_penalty"]
    hype_penalty: int = GATE_POINTS["hype_penalty"]
    caps_penalty: int = GATE_POINTS["caps_penalty"]
    llm_clean: int = GATE_POINTS["llm_clean"]
    llm_reject_penalty: int = GATE_POINTS["llm_reject_penalty"]
    llm_unavailable: int = GATE_POINTS["llm_unavailable"]


class IntakeRules(BaseModel):
    """Configuration for Stage 1: Intake Gate"""
    required_fields: List[str] = Field(default_factory=lambda: list(REQUIRED_FIELDS))
    social_media_domains: List[str] = Field(default_factory=lambda: list(SOCIAL_MEDIA_DOMAINS))
    min_problem_length: int = MIN_PROBLEM_LENGTH
    generic_category: str = GENERIC_CATEGORY
    caps_ratio_limit: float = CAPS_RATIO_LIMIT
    caps_min_word_length: int = CAPS_MIN_WORD_LENGTH
    keywords: KeywordLists = Field(default_factory=KeywordLists)
    points: GatePoints = Field(default_factory=GatePoints)


class GateThresholds(BaseModel):
    """Thresholds for the fast gate decision"""
    approve_min: int = GATE_THRESHOLDS["approve_min"]
    reject_below: int = GATE_THRESHOLDS["reject_below"]


class DeepThresholds(BaseModel):
    """Thresholds for the deep analysis decision"""
    approve_min: int = DEEP_THRESHOLDS["approve_min"]
    revision_min: int = DEEP_THRESHOLDS["revision_min"]
    reject_below: int = DEEP_THRESHOLDS["reject_below"]
    max_red_flags: int = DEEP_THRESHOLDS["max_red_flags"]


class RejectionRule(BaseModel):
    """One entry of the rejection reason priority list"""
    flags: Tuple[str, ...]
    reason: str


def _default_rejection_rules() -> List[RejectionRule]:
    return [RejectionRule(flags=flags, reason=reason) for flags, reason in REJECTION_REASONS]


class ReviewConfig(BaseModel):
    """Complete review configuration"""
    config_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Default review rules"

    intake: IntakeRules = Field(default_factory=IntakeRules)
    gate_thresholds: GateThresholds = Field(default_factory=GateThresholds)
    deep_thresholds: DeepThresholds = Field(default_factory=DeepThresholds)

    # Order matters: first rule with a matching flag wins
    rejection_rules: List[RejectionRule] = Field(default_factory=_default_rejection_rules)
    default_rejection_reason: str = DEFAULT_REJECTION_REASON

    created_at: datetime = Field(default_factory=utcnow)


def create_default_review_config(
    extra_scam_keywords: Optional[List[str]] = None,
    social_media_domains: Optional[List[str]] = None,
) -> ReviewConfig:
    """
    Factory function to create a review config with the standard rules
    """
    config = ReviewConfig()

    if extra_scam_keywords:
        config.intake.keywords.scam.extend(extra_scam_keywords)

    if social_media_domains is not None:
        config.intake.social_media_domains = social_media_domains

    return config
