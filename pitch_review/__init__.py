"""
Pitch Review Pipeline
=====================
Decides whether submitted startup pitches are fit to publish:
  Fast Gate:     intake checks → advisory LLM review → decision
  Deep Analysis: LLM sub-scores and founder feedback → decision
Decisions are written to the pitch and the founder is notified best-effort.
"""

__version__ = "1.0.0"
__author__ = "Pitch Review Team"
