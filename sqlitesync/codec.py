"""Conversion between Python values and SQLite cells.

Python values map onto SQLite storage classes as follows::

    None                          <-> NULL
    int                           <-> INTEGER (signed 64-bit)
    float                         <-> REAL
    str                           <-> TEXT (UTF-8)
    bytes / bytearray / memoryview -> BLOB, read back as bytes

``bool`` is not bindable even though it subclasses ``int``;
callers decide how their booleans should be stored.

SQLite has no NaN: a NaN float is stored as NULL and reads back as None.
Infinities are stored as REAL.
"""

import ctypes

from .errors import InternalError, InvalidTextEncodingError, sqlite_error
from .native import (
    SQLITE_OK, SQLITE_INTEGER, SQLITE_FLOAT, SQLITE_TEXT, SQLITE_BLOB, SQLITE_NULL,
    SQLITE_TRANSIENT,
)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def bind_value(lib, db, stmt, index, value):
    """Bind ``value`` to the 1-based slot ``index`` of ``stmt``.

    Returns False when the value cannot be bound: an unsupported type, or an
    int outside the signed 64-bit range. The caller reports which parameter
    was at fault. Engine failures raise SQLiteError.
    """
    if value is None:
        res = lib.sqlite3_bind_null(stmt, index)
    elif isinstance(value, bool):
        return False
    elif isinstance(value, int):
        if value < INT64_MIN or value > INT64_MAX:
            return False
        res = lib.sqlite3_bind_int64(stmt, index, value)
    elif isinstance(value, float):
        res = lib.sqlite3_bind_double(stmt, index, value)
    elif isinstance(value, str):
        try:
            b = value.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates have no UTF-8 form.
            return False
        res = lib.sqlite3_bind_text(stmt, index, b, len(b), SQLITE_TRANSIENT)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        b = bytes(value)
        res = lib.sqlite3_bind_blob(stmt, index, b, len(b), SQLITE_TRANSIENT)
    else:
        return False

    if res != SQLITE_OK:
        raise sqlite_error(db)
    return True


def column_value(lib, stmt, col):
    """Decode column ``col`` of the current row of ``stmt``."""
    kind = lib.sqlite3_column_type(stmt, col)
    if kind == SQLITE_INTEGER:
        return lib.sqlite3_column_int64(stmt, col)
    elif kind == SQLITE_FLOAT:
        return lib.sqlite3_column_double(stmt, col)
    elif kind == SQLITE_TEXT:
        # sqlite3_column_bytes must follow sqlite3_column_text so the length
        # matches the returned buffer.
        ptr = lib.sqlite3_column_text(stmt, col)
        length = lib.sqlite3_column_bytes(stmt, col)
        raw = ctypes.string_at(ptr, length) if ptr and length > 0 else b""
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidTextEncodingError(f"Column {col} contains invalid UTF-8 text: {e}") from e
    elif kind == SQLITE_NULL:
        return None
    elif kind == SQLITE_BLOB:
        # Zero-length blobs come back as a NULL pointer.
        ptr = lib.sqlite3_column_blob(stmt, col)
        length = lib.sqlite3_column_bytes(stmt, col)
        if ptr and length > 0:
            return ctypes.string_at(ptr, length)
        return b""
    raise InternalError(f"Unexpected SQLite column type {kind} for column {col}")
