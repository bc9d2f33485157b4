"""
Pairing pipeline.

Responsibilities:
- Pull in-stock candidate wines from the inventory.
- Score every candidate with the rules and the ensemble.
- Enrich the top candidates with AI reasoning and rank the result.
- Cache ranked lists per dish and de-duplicate concurrent identical requests.
"""
