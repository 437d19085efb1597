"""ORM Models — SQLAlchemy declarative models for souls and their edges.

Invariants:
    - All models inherit from Base (db/base.py)
    - Soul is the aggregate root; edges scoped by soul_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from souls.models.soul import Soul  # noqa: F401
from souls.models.soul_edge import SoulEdge  # noqa: F401
