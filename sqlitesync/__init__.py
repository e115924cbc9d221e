"""Synchronous prepared-statement execution on top of the SQLite C library."""

from .native import (
    load_library, sqlite_version,
    SQLITE_OK, SQLITE_ERROR, SQLITE_CANTOPEN, SQLITE_RANGE, SQLITE_ROW, SQLITE_DONE,
    SQLITE_INTEGER, SQLITE_FLOAT, SQLITE_TEXT, SQLITE_BLOB, SQLITE_NULL,
)
from .errors import (
    Error, InvalidStateError, InvalidArgumentTypeError, InvalidArgumentValueError,
    UnbindableTypeError, UnsupportedArgumentShapeError, UnknownNamedParameterError,
    IllegalConstructorError, InvalidTextEncodingError, InternalError, SQLiteError,
)
from .database import DatabaseSync, StatementSync, MEMORY

__all__ = [
    "DatabaseSync", "StatementSync", "MEMORY",
    "Error", "InvalidStateError", "InvalidArgumentTypeError", "InvalidArgumentValueError",
    "UnbindableTypeError", "UnsupportedArgumentShapeError", "UnknownNamedParameterError",
    "IllegalConstructorError", "InvalidTextEncodingError", "InternalError", "SQLiteError",
    "load_library", "sqlite_version",
    "SQLITE_OK", "SQLITE_ERROR", "SQLITE_CANTOPEN", "SQLITE_RANGE", "SQLITE_ROW", "SQLITE_DONE",
    "SQLITE_INTEGER", "SQLITE_FLOAT", "SQLITE_TEXT", "SQLITE_BLOB", "SQLITE_NULL",
]
