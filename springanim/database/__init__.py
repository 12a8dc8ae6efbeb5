"""
Database package for springanim.

Exports:
- SpringDB: Preset and animation storage
- get_db: Singleton accessor
"""
from .engine import SpringDB, get_db, close_db

__all__ = ['SpringDB', 'get_db', 'close_db']
