from .native import load_library


# Exceptions
class Error(Exception):
    code = "ERR_SQLITESYNC"

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidStateError(Error):
    code = "ERR_INVALID_STATE"


class InvalidArgumentTypeError(Error):
    code = "ERR_INVALID_ARG_TYPE"


class InvalidArgumentValueError(Error):
    code = "ERR_INVALID_ARG_VALUE"


class UnbindableTypeError(InvalidArgumentTypeError):
    """A parameter value is not an int, float, str, None or bytes-like object.

    ``parameter`` is the 1-based argument number for anonymous parameters and
    the parameter name for named ones.
    """

    def __init__(self, message, parameter):
        super().__init__(message)
        self.parameter = parameter


class UnsupportedArgumentShapeError(InvalidArgumentTypeError):
    pass


class UnknownNamedParameterError(InvalidArgumentValueError):
    def __init__(self, name, argument):
        super().__init__(f"Unknown named parameter '{name}' in argument {argument}.")
        self.name = name
        self.argument = argument


class IllegalConstructorError(Error):
    code = "ERR_ILLEGAL_CONSTRUCTOR"


class InvalidTextEncodingError(Error):
    code = "ERR_INVALID_TEXT"


class InternalError(Error):
    code = "ERR_INTERNAL_ASSERTION"


class SQLiteError(Error):
    """A failure reported by the SQLite engine.

    ``errcode`` is the extended result code and ``errstr`` the engine's
    description of it. ``sql`` is the statement text when the failure is tied
    to one.
    """

    code = "ERR_SQLITE_ERROR"

    def __init__(self, message, errcode, errstr, sql=None):
        super().__init__(message)
        self.errcode = errcode
        self.errstr = errstr
        self.sql = sql


def sqlite_error(db_handle, *, sql=None):
    """Build a SQLiteError from the engine's last error on ``db_handle``."""
    lib = load_library()
    errcode = lib.sqlite3_extended_errcode(db_handle)
    msg = lib.sqlite3_errmsg(db_handle)
    errstr = lib.sqlite3_errstr(errcode)
    # Native messages are UTF-8; replace anything that is not.
    msg_str = msg.decode("utf-8", errors="replace") if msg else f"Unknown error {errcode}"
    errstr_str = errstr.decode("utf-8", errors="replace") if errstr else ""
    return SQLiteError(msg_str, int(errcode), errstr_str, sql=sql)
