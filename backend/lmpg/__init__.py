"""Let My People Grow — church attendance backend.

Invariants:
    - Package root contains no executable code (no import side effects)
"""
