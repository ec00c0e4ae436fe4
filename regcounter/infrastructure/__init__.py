"""Infrastructure Layer — filesystem access, collaborator adapters and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All IO failures mapped to RegCounterError subclasses (core/errors.py)
"""
