"""regcounter — per-day registration attribution for TeamSpeak 3 administrators.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
