import ctypes
import ctypes.util
import os
import sys
from ctypes import c_int, c_int64, c_double, c_char_p, c_void_p, POINTER

# Result codes (must match sqlite3.h).
SQLITE_OK = 0
SQLITE_ERROR = 1
SQLITE_CANTOPEN = 14
SQLITE_RANGE = 25
SQLITE_ROW = 100
SQLITE_DONE = 101

# Fundamental datatypes reported by sqlite3_column_type().
SQLITE_INTEGER = 1
SQLITE_FLOAT = 2
SQLITE_TEXT = 3
SQLITE_BLOB = 4
SQLITE_NULL = 5

# Destructor sentinel telling the engine to copy bound text/blob data
# before the bind call returns.
SQLITE_TRANSIENT = c_void_p(-1)

_lib = None


def _candidate_paths():
    found = ctypes.util.find_library("sqlite3")
    if found:
        yield found

    if sys.platform == "win32":
        yield "sqlite3.dll"
    elif sys.platform == "darwin":
        yield "libsqlite3.dylib"
        yield "/usr/lib/libsqlite3.dylib"
    else:
        yield "libsqlite3.so.0"
        yield "libsqlite3.so"


def load_library():
    global _lib
    if _lib is not None:
        return _lib

    lib_path = os.environ.get("SQLITESYNC_NATIVE_LIB")

    if lib_path:
        try:
            lib = ctypes.CDLL(lib_path)
        except OSError as e:
            raise RuntimeError(f"Failed to load SQLite native library at {lib_path}: {e}")
    else:
        # Try the names the platform loader understands; the first one that
        # loads wins.
        lib = None
        errors = []
        for candidate in _candidate_paths():
            try:
                lib = ctypes.CDLL(candidate)
                break
            except OSError as e:
                errors.append(f"{candidate}: {e}")
        if lib is None:
            raise RuntimeError(
                "Could not find the SQLite native library. Set SQLITESYNC_NATIVE_LIB env var. "
                + "; ".join(errors)
            )

    # Define signatures

    lib.sqlite3_libversion.argtypes = []
    lib.sqlite3_libversion.restype = c_char_p

    # Sessions
    lib.sqlite3_open.argtypes = [c_char_p, POINTER(c_void_p)]
    lib.sqlite3_open.restype = c_int

    lib.sqlite3_close.argtypes = [c_void_p]
    lib.sqlite3_close.restype = c_int

    # close_v2 defers the close until outstanding statements are finalized,
    # which makes it safe to call from a GC finalizer.
    lib.sqlite3_close_v2.argtypes = [c_void_p]
    lib.sqlite3_close_v2.restype = c_int

    # Error introspection
    lib.sqlite3_extended_errcode.argtypes = [c_void_p]
    lib.sqlite3_extended_errcode.restype = c_int

    lib.sqlite3_errmsg.argtypes = [c_void_p]
    lib.sqlite3_errmsg.restype = c_char_p

    lib.sqlite3_errstr.argtypes = [c_int]
    lib.sqlite3_errstr.restype = c_char_p

    # Statements
    lib.sqlite3_prepare_v2.argtypes = [c_void_p, c_char_p, c_int, POINTER(c_void_p), POINTER(c_char_p)]
    lib.sqlite3_prepare_v2.restype = c_int

    lib.sqlite3_finalize.argtypes = [c_void_p]
    lib.sqlite3_finalize.restype = c_int

    lib.sqlite3_reset.argtypes = [c_void_p]
    lib.sqlite3_reset.restype = c_int

    lib.sqlite3_clear_bindings.argtypes = [c_void_p]
    lib.sqlite3_clear_bindings.restype = c_int

    lib.sqlite3_sql.argtypes = [c_void_p]
    lib.sqlite3_sql.restype = c_char_p

    lib.sqlite3_step.argtypes = [c_void_p]
    lib.sqlite3_step.restype = c_int

    # Parameters
    lib.sqlite3_bind_parameter_count.argtypes = [c_void_p]
    lib.sqlite3_bind_parameter_count.restype = c_int

    lib.sqlite3_bind_parameter_name.argtypes = [c_void_p, c_int]
    lib.sqlite3_bind_parameter_name.restype = c_char_p

    lib.sqlite3_bind_null.argtypes = [c_void_p, c_int]
    lib.sqlite3_bind_null.restype = c_int

    lib.sqlite3_bind_int64.argtypes = [c_void_p, c_int, c_int64]
    lib.sqlite3_bind_int64.restype = c_int

    lib.sqlite3_bind_double.argtypes = [c_void_p, c_int, c_double]
    lib.sqlite3_bind_double.restype = c_int

    lib.sqlite3_bind_text.argtypes = [c_void_p, c_int, c_char_p, c_int, c_void_p]
    lib.sqlite3_bind_text.restype = c_int

    lib.sqlite3_bind_blob.argtypes = [c_void_p, c_int, c_char_p, c_int, c_void_p]
    lib.sqlite3_bind_blob.restype = c_int

    # Columns
    lib.sqlite3_column_count.argtypes = [c_void_p]
    lib.sqlite3_column_count.restype = c_int

    lib.sqlite3_column_name.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_name.restype = c_char_p

    lib.sqlite3_column_type.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_type.restype = c_int

    lib.sqlite3_column_int64.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_int64.restype = c_int64

    lib.sqlite3_column_double.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_double.restype = c_double

    # Text and blob accessors return raw pointers; callers copy the bytes
    # out with ctypes.string_at before the statement steps again.
    lib.sqlite3_column_text.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_text.restype = c_void_p

    lib.sqlite3_column_blob.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_blob.restype = c_void_p

    lib.sqlite3_column_bytes.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_bytes.restype = c_int

    _lib = lib
    return _lib


def sqlite_version():
    """Version string of the loaded SQLite library, e.g. ``"3.45.1"``."""
    return load_library().sqlite3_libversion().decode("ascii")
