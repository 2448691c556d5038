"""
File persistence helpers.

- **json_store.py**: Tolerant JSON load and atomic JSON save.
- **rw_lock.py**: Shared/exclusive lock guarding the in-memory stores.
"""
