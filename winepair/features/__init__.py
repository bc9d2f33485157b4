"""
Feature extraction.

Responsibilities:
- Map dish context and candidate attributes onto category indices.
- Reserve index 0 for values the model never saw.
- Clip and normalise guest count; carry the rank slot for aggregation.
"""
