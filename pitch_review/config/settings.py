"""
Configuration settings for the Pitch Review Pipeline
"""

import os

# =============================================================================
# LLM CONFIGURATION
# =============================================================================

LLM_CONFIG = {
    "provider": os.getenv("LLM_PROVIDER", "openrouter"),  # openrouter, openai, anthropic
    "model": os.getenv("LLM_MODEL", "openai/gpt-4o-mini"),
    "api_key": (
        os.getenv("OPENROUTER_API_KEY")
        or os.getenv("OPENAI_API_KEY")
        or os.getenv("ANTHROPIC_API_KEY", "")
    ),
    "base_url": os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1"),
    "timeout_seconds": float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
    "max_tokens": 1500,
    "temperature": 0.3,
    # OpenRouter specific headers
    "site_url": os.getenv("OPENROUTER_SITE_URL", "http://localhost:8000"),
    "app_name": os.getenv("OPENROUTER_APP_NAME", "Pitch Review Pipeline"),
}

# =============================================================================
# URL PROBE
# =============================================================================

PROBE_CONFIG = {
    "timeout_seconds": float(os.getenv("URL_PROBE_TIMEOUT_SECONDS", "5")),
    "user_agent": "PitchReviewBot/1.0",
}

SOCIAL_MEDIA_DOMAINS = [
    "twitter.com",
    "linkedin.com",
    "facebook.com",
    "instagram.com",
    "x.com",
]

# =============================================================================
# INTAKE GATE POINTS
# =============================================================================

GATE_POINTS = {
    "url_reachable": 20,
    "social_media_penalty": -10,
    "product_live": 10,
    "completeness_max": 20,
    "problem_depth": 10,
    "specific_category": 10,
    "scam_penalty": -30,
    "hype_penalty": -10,
    "caps_penalty": -10,
    # Shallow LLM review
    "llm_clean": 30,
    "llm_reject_penalty": -20,
    "llm_unavailable": 15,
}

REQUIRED_FIELDS = [
    "startup_name",
    "one_liner",
    "product_url",
    "product_stage",
    "category",
    "what_problem_do_you_solve",
]

MIN_PROBLEM_LENGTH = 50
GENERIC_CATEGORY = "Other"
CAPS_RATIO_LIMIT = 0.3
CAPS_MIN_WORD_LENGTH = 3

# =============================================================================
# KEYWORD HEURISTICS
# =============================================================================

KEYWORD_LISTS = {
    "scam": [
        "guaranteed",
        "get rich",
        "mlm",
        "passive income",
        "crypto gains",
        "100x returns",
        "guaranteed returns",
    ],
    "hype": [
        "best app ever",
        "revolutionary platform",
        "change the world",
    ],
    "non_product": [
        "agency",
        "freelance",
        "consulting",
        "services",
        "coaching",
    ],
}

# =============================================================================
# DECISION THRESHOLDS
# =============================================================================

GATE_THRESHOLDS = {
    "approve_min": 70,
    "reject_below": 40,
}

DEEP_THRESHOLDS = {
    "approve_min": 75,
    "revision_min": 50,
    "reject_below": 40,
    "max_red_flags": 2,
}

# =============================================================================
# REJECTION REASONS (priority order, first matching flag wins)
# =============================================================================

REJECTION_REASONS = [
    (("product_not_live",), "No live product - please submit once you have an MVP"),
    (
        ("invalid_product_url", "product_url_not_accessible"),
        "Product URL does not work or is not accessible",
    ),
    (("scam_indicators",), "Content violates our guidelines"),
    (("not_a_startup_product",), "Not a startup product"),
    (
        ("problem_description_too_short",),
        "Description is unclear - please explain what your product does",
    ),
]

DEFAULT_REJECTION_REASON = (
    "Submission does not meet quality standards. Please review and resubmit."
)

# =============================================================================
# NOTIFICATIONS
# =============================================================================

NOTIFICATION_CONFIG = {
    "app_url": os.getenv("APP_URL", "https://firstlook.app"),
    "team_name": os.getenv("TEAM_NAME", "The FirstLook Team"),
    "product_name": os.getenv("PRODUCT_NAME", "FirstLook"),
}
