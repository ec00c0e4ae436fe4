"""Core Layer — pure domain logic, no network, no async, no framework imports.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - Every function except the AttributionTable methods is pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: parsing, counting and
      encoding are testable without files, threads or a server
"""
