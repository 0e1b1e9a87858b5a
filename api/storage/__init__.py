"""SQLite storage: connections, schema and transactions"""
from .connection import DatabaseConnection
from .schema import SchemaManager
from .transaction import transaction

__all__ = ['DatabaseConnection', 'SchemaManager', 'transaction']
