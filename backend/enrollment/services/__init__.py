"""Services Layer — registration, email verification, and login handlers.

Invariants:
    - Handlers receive an AsyncSession and Settings explicitly (no ambient globals)
    - Handlers raise EnrollmentError subclasses; routes never translate them
    - Every handler that writes owns its commit/rollback

Design Decisions:
    - One handler file per flow for locality
"""
