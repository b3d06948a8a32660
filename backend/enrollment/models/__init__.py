"""ORM Models — SQLAlchemy declarative models for the enrollment entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Parent is the aggregate root; every Child belongs to exactly one Parent

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from enrollment.models.registration_code import RegistrationCode  # noqa: F401
from enrollment.models.parent import Parent  # noqa: F401
from enrollment.models.child import Child  # noqa: F401
