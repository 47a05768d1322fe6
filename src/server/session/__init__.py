"""SQL-backed persistence for serialized web sessions with time-based expiry."""

from .dependencies import get_session_store
from .errors import SessionStoreError, StoreConfigurationError
from .executor import PostgresExecutor, QueryExecutor, SQLiteExecutor
from .models import SessionRecord
from .schema import SchemaInitializer, schema_initializer
from .store import SessionStore

__all__ = [
    "PostgresExecutor",
    "QueryExecutor",
    "SQLiteExecutor",
    "SchemaInitializer",
    "SessionRecord",
    "SessionStore",
    "SessionStoreError",
    "StoreConfigurationError",
    "get_session_store",
    "schema_initializer",
]
