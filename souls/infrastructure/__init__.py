"""Infrastructure Layer — database access, storage adapter, and logging.

Invariants:
    - Infrastructure implements core protocols; core never imports it
    - All SQLAlchemy failures surface as StorageError

Design Decisions:
    - Storage adapter kept next to the session manager it runs on
"""
