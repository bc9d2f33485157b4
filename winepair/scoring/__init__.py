"""
Rule-based pairing scorer.

Responsibilities:
- Score style, flavour, texture, regional and seasonal fit per candidate.
- Combine the five factors with configured weights that sum to 1.0.
- Apply guest preference modifiers.
"""
