import sqlitesync
import time
import os


def run_benchmark():
    db_path = "bench_fetch.db"
    if os.path.exists(db_path):
        os.remove(db_path)

    db = sqlitesync.DatabaseSync(db_path)

    print("Setting up data...")
    db.prepare("CREATE TABLE bench (id INTEGER, val TEXT, f REAL)").run()

    # Insert 100k rows
    count = 100000
    data = [(i, f"value_{i}", float(i)) for i in range(count)]

    start_time = time.perf_counter()
    db.prepare("BEGIN").run()
    insert = db.prepare("INSERT INTO bench VALUES (?, ?, ?)")
    for row in data:
        insert.run(*row)
    db.prepare("COMMIT").run()
    end_time = time.perf_counter()
    print(f"Insert {count} rows: {end_time - start_time:.4f}s")

    # Benchmark all()
    db.close()
    db.open()

    print("Benchmarking all()...")
    start_time = time.perf_counter()
    rows = db.prepare("SELECT * FROM bench").all()
    end_time = time.perf_counter()

    print(f"all() {count} rows: {end_time - start_time:.4f}s")
    assert len(rows) == count

    # Benchmark get() on a reused statement
    print("Benchmarking get() by id...")
    lookup = db.prepare("SELECT val FROM bench WHERE id = ?")
    start_time = time.perf_counter()
    for i in range(0, count, 10):
        assert lookup.get(i) is not None
    end_time = time.perf_counter()

    print(f"get() x {count // 10}: {end_time - start_time:.4f}s")

    db.close()
    if os.path.exists(db_path):
        os.remove(db_path)

if __name__ == "__main__":
    run_benchmark()
