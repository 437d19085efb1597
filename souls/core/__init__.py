"""Core Layer — pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure; the only async signatures are the storage Protocol's

Design Decisions:
    - Functional core separated from imperative shell
"""
