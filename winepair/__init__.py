"""
Wine pairing recommendation engine.

Ranks candidate wines for a dish by combining a rule-based heuristic, a
pretrained decision-tree ensemble and optional reasoning from generative
AI providers.
"""
