"""Services Layer — soul store and relationship engine.

Invariants:
    - Services receive their storage collaborator explicitly (constructor injection)
    - Services raise SoulsError subclasses; they never format HTTP responses

Design Decisions:
    - One service per concern: identity lifecycle vs. relationship edges
"""
