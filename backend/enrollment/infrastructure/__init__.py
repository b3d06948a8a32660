"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
    - Clients are constructed explicitly at startup and injected into handlers

Design Decisions:
    - No retries: every store or mail failure is terminal for the request
"""
