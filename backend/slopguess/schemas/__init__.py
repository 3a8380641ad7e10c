"""Pydantic Schemas - request/response validation for API endpoints.

Invariants:
    - Public round shapes never carry the prompt while the round is not completed
"""
