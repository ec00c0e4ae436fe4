"""Pydantic Schemas — response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (API responses)
"""
