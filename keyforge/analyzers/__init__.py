"""
KeyForge Analyzers
===================

Strength scoring, crack-time estimation and the randomness self-test.
"""

from keyforge.analyzers.crack_time import estimate_time_to_crack
from keyforge.analyzers.strength import StrengthAnalyzer
from keyforge.analyzers.rng_audit import RandomnessAuditor

__all__ = [
    "RandomnessAuditor",
    "StrengthAnalyzer",
    "estimate_time_to_crack",
]
