import ctypes
import logging
import os
import weakref

from .binder import ParameterSlots, bind_params
from .codec import column_value
from .errors import (
    IllegalConstructorError, InvalidArgumentTypeError, InvalidArgumentValueError,
    InvalidStateError, sqlite_error,
)
from .native import load_library, SQLITE_OK, SQLITE_ROW, SQLITE_DONE

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

# Only DatabaseSync.prepare() can build statements.
_PREPARE_TOKEN = object()


# Finalizer callbacks must not reference the wrapper they clean up after.
def _close_native(lib, db):
    lib.sqlite3_close_v2(db)


def _finalize_native(lib, stmt):
    lib.sqlite3_finalize(stmt)


class StatementSync:
    def __init__(self, database=None, handle=None, *, _token=None):
        if _token is not _PREPARE_TOKEN:
            raise IllegalConstructorError("Illegal constructor")
        self._database = database
        self._lib = database._lib
        self._handle = handle
        self._slots = ParameterSlots.from_statement(self._lib, handle)
        self._allow_bare = True
        self._executing = False
        self._finalizer = weakref.finalize(self, _finalize_native, self._lib, handle)

    def __repr__(self):
        state = "finalized" if not self._finalizer.alive else "prepared"
        return f"<StatementSync {state} parameters={len(self._slots)}>"

    @property
    def database(self):
        return self._database

    @property
    def finalized(self):
        return not self._finalizer.alive

    @property
    def parameter_count(self):
        return len(self._slots)

    def parameter_name(self, index):
        """Declared name of the 1-based slot ``index``; None for ``?`` slots."""
        return self._slots.name(index)

    @property
    def source_sql(self):
        self._check_open()
        sql = self._lib.sqlite3_sql(self._handle)
        return sql.decode("utf-8") if sql is not None else None

    @property
    def column_names(self):
        self._check_open()
        return [self._column_name(i) for i in range(self._lib.sqlite3_column_count(self._handle))]

    def set_allow_bare_named_parameters(self, enabled):
        """Allow ``{"id": 1}`` to bind a slot declared as ``:id``, ``@id`` or ``$id``."""
        if not isinstance(enabled, bool):
            raise InvalidArgumentTypeError('The "enabled" argument must be a boolean.')
        self._allow_bare = enabled

    def finalize(self):
        if self._finalizer.alive:
            self._finalizer()
            self._database._statements.discard(self)
            logger.debug("Finalized statement %r", self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finalize()

    # Execution modes

    def run(self, *params):
        """Execute for side effects. Any rows the statement produces are ignored."""
        self._begin(params)
        try:
            if self._step() == SQLITE_ROW:
                self._release()
        finally:
            self._executing = False

    def get(self, *params):
        """Return the first result row as a dict, or None if there is none."""
        self._begin(params)
        try:
            if self._step() == SQLITE_DONE:
                return None
            row = self._row()
            self._release()
            return row
        finally:
            self._executing = False

    def all(self, *params):
        """Return every result row, in the order the engine produced them."""
        self._begin(params)
        try:
            rows = []
            while self._step() == SQLITE_ROW:
                rows.append(self._row())
            return rows
        finally:
            self._executing = False

    # Shared step protocol

    def _check_open(self):
        if not self._database.is_open:
            raise InvalidStateError("database is not open")
        if not self._finalizer.alive:
            raise InvalidStateError("statement has been finalized")

    def _begin(self, params):
        self._check_open()
        if self._executing:
            raise InvalidStateError("statement is already executing")
        self._executing = True
        try:
            db = self._database._db
            r = self._lib.sqlite3_reset(self._handle)
            if r != SQLITE_OK:
                raise sqlite_error(db, sql=self.source_sql)
            self._lib.sqlite3_clear_bindings(self._handle)
            bind_params(self._lib, db, self._handle, self._slots, params, allow_bare=self._allow_bare)
        except BaseException:
            self._executing = False
            raise

    def _step(self):
        r = self._lib.sqlite3_step(self._handle)
        if r == SQLITE_ROW or r == SQLITE_DONE:
            return r
        err = sqlite_error(self._database._db, sql=self.source_sql)
        # Clear the failed run now so the next call's reset starts clean.
        self._lib.sqlite3_reset(self._handle)
        raise err

    def _release(self):
        # Drops the remaining rows and the read lock held by an unfinished run.
        r = self._lib.sqlite3_reset(self._handle)
        if r != SQLITE_OK:
            raise sqlite_error(self._database._db, sql=self.source_sql)

    def _column_name(self, i):
        name = self._lib.sqlite3_column_name(self._handle, i)
        if name is None:
            raise InvalidStateError(f"Cannot get name of column {i}")
        return name.decode("utf-8")

    def _row(self):
        row = {}
        for i in range(self._lib.sqlite3_column_count(self._handle)):
            row[self._column_name(i)] = column_value(self._lib, self._handle, i)
        return row


class DatabaseSync:
    def __init__(self, path=None, *, open=True):
        if isinstance(path, os.PathLike):
            path = os.fspath(path)
        if not isinstance(path, str):
            raise InvalidArgumentTypeError('The "path" argument must be a string.')
        if "\0" in path:
            raise InvalidArgumentTypeError('The "path" argument must be a string without null bytes.')
        if not isinstance(open, bool):
            raise InvalidArgumentTypeError('The "open" argument must be a boolean.')

        self._lib = load_library()
        self._location = path
        self._db = None
        self._finalizer = None
        # Weak so an unreferenced statement can still be collected and finalized.
        self._statements = weakref.WeakSet()

        if open:
            self.open()

    def __repr__(self):
        state = "open" if self.is_open else "closed"
        return f"<DatabaseSync {self._location!r} {state}>"

    @property
    def location(self):
        return self._location

    @property
    def is_open(self):
        return self._db is not None

    def open(self):
        if self._db is not None:
            raise InvalidStateError("database is already open")

        handle = ctypes.c_void_p()
        r = self._lib.sqlite3_open(self._location.encode("utf-8"), ctypes.byref(handle))
        if r != SQLITE_OK:
            err = sqlite_error(handle)
            # sqlite3_open usually hands back a handle even on failure.
            if handle.value is not None:
                self._lib.sqlite3_close(handle)
            raise err

        self._db = handle
        self._finalizer = weakref.finalize(self, _close_native, self._lib, handle)
        logger.debug("Opened SQLite database %s", self._location)

    def close(self):
        if self._db is None:
            raise InvalidStateError("database is not open")

        # Statements must go before the session they were prepared on.
        for stmt in list(self._statements):
            stmt.finalize()

        r = self._lib.sqlite3_close(self._db)
        if r != SQLITE_OK:
            raise sqlite_error(self._db)

        self._finalizer.detach()
        self._finalizer = None
        self._db = None
        logger.debug("Closed SQLite database %s", self._location)

    def prepare(self, sql):
        if self._db is None:
            raise InvalidStateError("database is not open")
        if not isinstance(sql, str):
            raise InvalidArgumentTypeError('The "sql" argument must be a string.')

        encoded = sql.encode("utf-8")
        stmt_ptr = ctypes.c_void_p()
        r = self._lib.sqlite3_prepare_v2(self._db, encoded, len(encoded), ctypes.byref(stmt_ptr), None)
        if r != SQLITE_OK:
            raise sqlite_error(self._db, sql=sql)
        if stmt_ptr.value is None:
            # Blank input or only comments: the engine compiles nothing.
            raise InvalidArgumentValueError('The "sql" argument must contain an SQL statement.')

        stmt = StatementSync(self, stmt_ptr, _token=_PREPARE_TOKEN)
        self._statements.add(stmt)
        logger.debug("Prepared statement with %d parameters", stmt.parameter_count)
        return stmt

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._db is not None:
            self.close()
