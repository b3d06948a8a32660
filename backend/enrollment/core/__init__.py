"""Core Layer — error hierarchy and security primitives.

Invariants:
    - No database or HTTP I/O in core/
    - Everything here is testable without an app or a store
"""
