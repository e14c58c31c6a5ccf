"""
ai — Generated analysis (SWOT, memo, news, pitch deck), LBO starting points
and structured valuation research.
"""

from pitchly.services.ai.llm_client import (
    AnalysisGenerationError,
    LLMNotConfiguredError,
    generate_analysis,
    generate_lbo_assumptions,
    generate_valuation_analysis,
    generate_valuation_pitch_deck,
    parse_pitch_deck,
)

__all__ = [
    "AnalysisGenerationError",
    "LLMNotConfiguredError",
    "generate_analysis",
    "generate_lbo_assumptions",
    "generate_valuation_analysis",
    "generate_valuation_pitch_deck",
    "parse_pitch_deck",
]
