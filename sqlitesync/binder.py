"""Resolve call arguments against a prepared statement's parameter slots.

Each argument passed to an execution method is one of two shapes:

* a :class:`collections.abc.Mapping` - a group of named parameters, bound by
  matching each key against the declared slot names;
* anything else - a single anonymous value, bound to the next slot that the
  engine did not give a name to.

Lists and tuples are rejected rather than spread into anonymous slots.
"""

from collections.abc import Mapping

from .codec import bind_value
from .errors import (
    InvalidStateError, UnbindableTypeError, UnknownNamedParameterError,
    UnsupportedArgumentShapeError,
)

# Prefixes SQLite accepts for named parameters. Numbered "?NNN" slots also
# carry a name but have no bare form.
SIGILS = (":", "@", "$")


class ParameterSlots:
    """Parameter layout of a prepared statement.

    ``names[i]`` is the declared name of slot ``i + 1``, or None for an
    anonymous ``?`` slot.
    """

    def __init__(self, names):
        self.names = list(names)
        self._index = {name: i for i, name in enumerate(self.names, start=1) if name is not None}
        self._bare = None

    @classmethod
    def from_statement(cls, lib, stmt):
        count = lib.sqlite3_bind_parameter_count(stmt)
        names = []
        # Parameter indexing starts at one.
        for i in range(1, count + 1):
            name = lib.sqlite3_bind_parameter_name(stmt, i)
            names.append(name.decode("utf-8") if name is not None else None)
        return cls(names)

    def __len__(self):
        return len(self.names)

    def is_named(self, index):
        return 1 <= index <= len(self.names) and self.names[index - 1] is not None

    def name(self, index):
        if 1 <= index <= len(self.names):
            return self.names[index - 1]
        return None

    def _bare_names(self):
        if self._bare is None:
            bare = {}
            for name in self.names:
                if name is not None and name[:1] in SIGILS:
                    bare.setdefault(name[1:], []).append(name)
            self._bare = bare
        return self._bare

    def lookup(self, key, allow_bare=True):
        """Slot index for ``key``, or 0 when nothing matches."""
        index = self._index.get(key, 0)
        if index or not allow_bare or key[:1] in SIGILS:
            return index

        candidates = self._bare_names().get(key, ())
        if len(candidates) > 1:
            raise InvalidStateError(
                f"Cannot create bare named parameter '{key}' because of conflicting names "
                + " and ".join(f"'{c}'" for c in candidates) + "."
            )
        if candidates:
            return self._index[candidates[0]]
        return 0


def _unbindable(value, subject, parameter):
    if isinstance(value, int) and not isinstance(value, bool):
        return UnbindableTypeError(
            f"{subject} is too large to be represented as a SQLite integer.", parameter
        )
    return UnbindableTypeError(f"{subject} cannot be bound to SQLite.", parameter)


def bind_params(lib, db, stmt, slots, params, *, allow_bare=True):
    """Bind every call argument in ``params`` to ``stmt``.

    Binding stops at the first failure. Slots bound before it are left as they
    are; the statement is reset and its bindings cleared before its next use.
    """
    anon_index = 1

    for arg_number, param in enumerate(params, start=1):
        if isinstance(param, Mapping):
            for key, value in param.items():
                if not isinstance(key, str):
                    raise UnsupportedArgumentShapeError(
                        f"Named parameter keys must be strings, got {type(key).__name__} "
                        f"in argument {arg_number}."
                    )
                index = slots.lookup(key, allow_bare)
                if index == 0:
                    raise UnknownNamedParameterError(key, arg_number)
                if not bind_value(lib, db, stmt, index, value):
                    raise _unbindable(value, f"Named parameter '{key}' in argument {arg_number}", key)
        elif isinstance(param, (list, tuple)):
            raise UnsupportedArgumentShapeError(
                f"Argument {arg_number} is a {type(param).__name__}; arrays of anonymous "
                "parameters are not supported, pass each value as its own argument."
            )
        else:
            # Never consume a slot the statement refers to by name.
            while slots.is_named(anon_index):
                anon_index += 1

            if not bind_value(lib, db, stmt, anon_index, param):
                raise _unbindable(param, f"Anonymous parameter in argument {arg_number}", arg_number)
            anon_index += 1
