from collections.abc import Mapping

import pytest
import sqlitesync
from sqlitesync import DatabaseSync


@pytest.fixture
def conn(db_path):
    conn = DatabaseSync(db_path)
    conn.prepare("CREATE TABLE foo (id INTEGER, val TEXT)").run()
    yield conn
    if conn.is_open:
        conn.close()


def test_positional_parameters_bind_in_order(conn):
    stmt = conn.prepare("SELECT ? AS a, ? AS b, ? AS c")
    assert stmt.parameter_count == 3
    assert stmt.get(1, "two", None) == {"a": 1, "b": "two", "c": None}


def test_named_parameters(conn):
    conn.prepare("INSERT INTO foo VALUES ($id, $val)").run({"$id": 2, "$val": "b"})
    conn.prepare("INSERT INTO foo VALUES (:id, :val)").run({":val": "c", ":id": 3})
    conn.prepare("INSERT INTO foo VALUES (@id, @val)").run({"@id": 4, "@val": "d"})

    stmt = conn.prepare("SELECT * FROM foo WHERE id = :target")
    assert stmt.get({":target": 3}) == {"id": 3, "val": "c"}
    assert conn.prepare("SELECT count(*) AS n FROM foo").get() == {"n": 3}


def test_parameter_names(conn):
    stmt = conn.prepare("SELECT ? AS a, $b AS b, :c AS c, ?7 AS d")
    assert stmt.parameter_count == 7
    assert stmt.parameter_name(1) is None
    assert stmt.parameter_name(2) == "$b"
    assert stmt.parameter_name(3) == ":c"
    assert stmt.parameter_name(7) == "?7"
    assert stmt.parameter_name(8) is None


def test_bare_named_parameters(conn):
    stmt = conn.prepare("SELECT $val AS v")
    assert stmt.get({"val": 42}) == {"v": 42}
    assert stmt.get({"$val": 43}) == {"v": 43}


def test_bare_named_parameters_can_be_disabled(conn):
    stmt = conn.prepare("SELECT $val AS v")
    stmt.set_allow_bare_named_parameters(False)

    with pytest.raises(sqlitesync.UnknownNamedParameterError):
        stmt.get({"val": 42})
    assert stmt.get({"$val": 42}) == {"v": 42}

    with pytest.raises(sqlitesync.InvalidArgumentTypeError):
        stmt.set_allow_bare_named_parameters("no")


def test_bare_named_parameter_conflict(conn):
    stmt = conn.prepare("SELECT :a AS x, $a AS y")
    with pytest.raises(sqlitesync.InvalidStateError, match="Cannot create bare named parameter 'a'"):
        stmt.get({"a": 1})
    assert stmt.get({":a": 1, "$a": 2}) == {"x": 1, "y": 2}


def test_named_parameter_reuse(conn):
    conn.prepare("INSERT INTO foo VALUES (1, 'a')").run()
    conn.prepare("INSERT INTO foo VALUES (2, 'b')").run()

    # The same named parameter appearing twice occupies one slot.
    stmt = conn.prepare("SELECT id FROM foo WHERE id = :target OR id = :target ORDER BY id")
    assert stmt.parameter_count == 1
    assert stmt.all({":target": 2}) == [{"id": 2}]


def test_positional_values_skip_named_slots(conn):
    stmt = conn.prepare("SELECT $y AS y, ? AS x, ? AS z")
    assert stmt.get(1, 3, {"$y": 2}) == {"x": 1, "y": 2, "z": 3}

    stmt = conn.prepare("SELECT ? AS x, $y AS y, ? AS z")
    assert stmt.get(1, {"$y": 2}, 3) == {"x": 1, "y": 2, "z": 3}


def test_several_named_groups(conn):
    stmt = conn.prepare("SELECT $a AS a, $b AS b")
    assert stmt.get({"$a": 1}, {"$b": 2}) == {"a": 1, "b": 2}


def test_mapping_subclasses_are_named_groups(conn):
    class Params(Mapping):
        def __init__(self, **values):
            self._values = values

        def __getitem__(self, key):
            return self._values[key]

        def __iter__(self):
            return iter(self._values)

        def __len__(self):
            return len(self._values)

    stmt = conn.prepare("SELECT :id AS id")
    assert stmt.get(Params(id=5)) == {"id": 5}


def test_unknown_named_parameter(conn):
    stmt = conn.prepare("INSERT INTO foo VALUES ($id, $val)")
    with pytest.raises(sqlitesync.UnknownNamedParameterError) as excinfo:
        stmt.run({"$id": 1, "$nope": "x"})

    err = excinfo.value
    assert err.name == "$nope"
    assert err.argument == 1
    assert err.code == "ERR_INVALID_ARG_VALUE"
    assert "$nope" in str(err)
    assert conn.prepare("SELECT * FROM foo").all() == []


def test_unknown_named_parameter_reports_argument_number(conn):
    stmt = conn.prepare("SELECT ? AS a, $b AS b")
    with pytest.raises(sqlitesync.UnknownNamedParameterError) as excinfo:
        stmt.get(1, {"$c": 2})
    assert excinfo.value.argument == 2


def test_arrays_of_anonymous_parameters_are_rejected(conn):
    stmt = conn.prepare("INSERT INTO foo VALUES (?, ?)")
    with pytest.raises(sqlitesync.UnsupportedArgumentShapeError, match="Argument 1 is a list"):
        stmt.run([1, "a"])
    with pytest.raises(sqlitesync.UnsupportedArgumentShapeError, match="Argument 2 is a tuple"):
        stmt.run(1, ("a",))
    assert conn.prepare("SELECT * FROM foo").all() == []


def test_non_string_named_keys_are_rejected(conn):
    stmt = conn.prepare("SELECT ?1 AS v")
    with pytest.raises(sqlitesync.UnsupportedArgumentShapeError) as excinfo:
        stmt.get({1: "x"})
    assert excinfo.value.code == "ERR_INVALID_ARG_TYPE"


def test_too_many_positional_parameters(conn):
    stmt = conn.prepare("SELECT ? AS v")
    with pytest.raises(sqlitesync.SQLiteError) as excinfo:
        stmt.get(1, 2)
    assert excinfo.value.errcode == sqlitesync.SQLITE_RANGE
    assert stmt.get(1) == {"v": 1}


def test_missing_parameters_bind_null(conn):
    stmt = conn.prepare("SELECT ? AS a, ? AS b")
    assert stmt.get(1) == {"a": 1, "b": None}


def test_bindings_do_not_leak_between_calls(conn):
    stmt = conn.prepare("SELECT ? AS a, $b AS b")
    assert stmt.get(1, {"$b": 2}) == {"a": 1, "b": 2}
    assert stmt.get() == {"a": None, "b": None}


def test_unbindable_anonymous_parameter(conn):
    stmt = conn.prepare("INSERT INTO foo (id, val) VALUES (?, ?)")
    for value in (object(), lambda: None, {1, 2}, True):
        with pytest.raises(sqlitesync.UnbindableTypeError, match="Anonymous parameter in argument 2 cannot be bound to SQLite") as excinfo:
            stmt.run(1, value)
        assert excinfo.value.parameter == 2
        assert excinfo.value.code == "ERR_INVALID_ARG_TYPE"
    assert conn.prepare("SELECT * FROM foo").all() == []


def test_unbindable_named_parameter(conn):
    stmt = conn.prepare("INSERT INTO foo (id, val) VALUES ($k, $v)")
    with pytest.raises(sqlitesync.UnbindableTypeError, match="Named parameter '\\$v' in argument 1 cannot be bound to SQLite") as excinfo:
        stmt.run({"$k": 1, "$v": lambda: None})
    assert excinfo.value.parameter == "$v"


def test_out_of_range_integer_names_its_parameter(conn):
    stmt = conn.prepare("SELECT ? AS a, ? AS b, $c AS c")

    with pytest.raises(sqlitesync.UnbindableTypeError, match="Anonymous parameter in argument 2 is too large") as excinfo:
        stmt.get(1, 2 ** 63)
    assert excinfo.value.parameter == 2

    with pytest.raises(sqlitesync.UnbindableTypeError, match="Named parameter 'c' in argument 3 is too large") as excinfo:
        stmt.get(1, 2, {"c": -(2 ** 63) - 1})
    assert excinfo.value.parameter == "c"
    assert excinfo.value.code == "ERR_INVALID_ARG_TYPE"

    assert stmt.get(1, 2, {"c": 3}) == {"a": 1, "b": 2, "c": 3}


def test_reentrant_execution_is_rejected(conn):
    stmt = conn.prepare("SELECT :id AS id")

    class Reentrant(Mapping):
        def __getitem__(self, key):
            return stmt.get({":id": 1})

        def __iter__(self):
            return iter([":id"])

        def __len__(self):
            return 1

    with pytest.raises(sqlitesync.InvalidStateError, match="statement is already executing"):
        stmt.get(Reentrant())
    assert stmt.get({":id": 2}) == {"id": 2}
