"""
AI reasoning layer.

Responsibilities:
- Ask an LLM for a short pairing explanation and a score adjustment.
- Fall back from the primary to the secondary provider per candidate.
- Turn timeouts, errors and malformed replies into typed failures.
"""
