"""Example: basic sqlitesync usage.

sqlitesync loads the system SQLite library. To use a specific build:
    SQLITESYNC_NATIVE_LIB=/path/to/libsqlite3.so python example.py
"""

import os
import tempfile
import sqlitesync


def main():
    # Create a temporary database file for this example.
    db_path = os.path.join(tempfile.gettempdir(), "sqlitesync_example.db")

    db = sqlitesync.DatabaseSync(db_path)

    # Create a table.
    db.prepare("""
        CREATE TABLE IF NOT EXISTS users (
            id    INTEGER PRIMARY KEY,
            name  TEXT NOT NULL,
            email TEXT UNIQUE
        )
    """).run()

    # Insert rows using anonymous (?) parameters; one prepared statement,
    # executed once per row.
    users = [
        ("Alice", "alice@example.com"),
        ("Bob", "bob@example.com"),
        ("Carol", "carol@example.com"),
    ]
    insert = db.prepare("INSERT INTO users (name, email) VALUES (?, ?)")
    for name, email in users:
        insert.run(name, email)

    # Query all users.
    print("All users:")
    for row in db.prepare("SELECT id, name, email FROM users ORDER BY id").all():
        print(f"  id={row['id']}  name={row['name']}  email={row['email']}")

    # Named parameter lookup.
    row = db.prepare("SELECT name FROM users WHERE email = :email").get({"email": "bob@example.com"})
    print(f"\nLookup by email: {row['name']}")

    # Engine errors carry the SQLite error code.
    try:
        insert.run("Bob again", "bob@example.com")
    except sqlitesync.SQLiteError as e:
        print(f"\nDuplicate email rejected: {e} (errcode={e.errcode}, errstr={e.errstr!r})")

    count = db.prepare("SELECT count(*) AS n FROM users").get()["n"]
    print(f"\nTotal users: {count}")

    db.close()

    # Clean up.
    for suffix in ("", "-journal"):
        try:
            os.unlink(db_path + suffix)
        except FileNotFoundError:
            pass

    print("\nDone.")


if __name__ == "__main__":
    main()
