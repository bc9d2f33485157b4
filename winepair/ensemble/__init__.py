"""
Ensemble inference.

Responsibilities:
- Load a versioned decision-tree forest and its category mapping table.
- Predict a pairing rating and the disagreement between trees.
- Degrade to "no prediction" when the artifact cannot be loaded.
"""
