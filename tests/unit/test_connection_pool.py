"""Tests for the thread-local SQLite connection pool."""

import sqlite3
import threading
from pathlib import Path

import pytest

from src.utils.connection_pool import ConnectionPool


class TestConnectionReuse:
    """A thread keeps one connection until the pool is closed."""

    def test_same_thread_reuses_connection(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")

        with pool.get_connection() as first:
            pass
        with pool.get_connection() as second:
            pass

        assert first is second
        assert pool.connection_count() == 1
        pool.close_all()

    def test_rows_are_mapping_like(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")

        with pool.get_connection() as conn:
            row = conn.execute("SELECT 1 AS answer").fetchone()

        assert row["answer"] == 1
        pool.close_all()

    def test_wal_mode(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")

        with pool.get_connection() as conn:
            mode = conn.execute("PRAGMA journal_mode").fetchone()[0]

        assert mode == "wal"
        pool.close_all()

    def test_threads_get_their_own_connection(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")
        seen: list[sqlite3.Connection] = []
        release = threading.Event()
        opened = threading.Barrier(3)

        def worker() -> None:
            with pool.get_connection() as conn:
                seen.append(conn)
            opened.wait()
            release.wait()

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        opened.wait()

        assert seen[0] is not seen[1]
        assert pool.connection_count() == 2

        release.set()
        for t in threads:
            t.join()
        pool.close_all()


class TestDeadThreadCleanup:
    """Connections of exited threads are closed when a new connection opens."""

    def test_dead_thread_connection_dropped(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")

        def worker() -> None:
            with pool.get_connection() as conn:
                conn.execute("SELECT 1")

        t = threading.Thread(target=worker)
        t.start()
        t.join()
        assert pool.connection_count() == 1

        # Opening a connection in this thread drops the dead worker's
        with pool.get_connection() as conn:
            conn.execute("SELECT 1")

        assert pool.connection_count() == 1
        pool.close_all()

    def test_live_thread_connection_kept(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")
        ready = threading.Event()
        done = threading.Event()

        def long_worker() -> None:
            with pool.get_connection() as conn:
                conn.execute("SELECT 1")
            ready.set()
            done.wait()

        t = threading.Thread(target=long_worker)
        t.start()
        ready.wait()

        with pool.get_connection() as conn:
            conn.execute("SELECT 1")

        assert pool.connection_count() == 2

        done.set()
        t.join()
        pool.close_all()


class TestFailureHandling:
    def test_rollback_on_error(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")
        with pool.get_connection() as conn:
            conn.execute("CREATE TABLE items (name TEXT)")
            conn.commit()

        with pytest.raises(RuntimeError):
            with pool.get_connection() as conn:
                conn.execute("INSERT INTO items VALUES ('half-done')")
                raise RuntimeError("boom")

        with pool.get_connection() as conn:
            assert conn.execute("SELECT COUNT(*) FROM items").fetchone()[0] == 0
        pool.close_all()

    def test_reopens_after_close_all(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")
        with pool.get_connection() as conn:
            conn.execute("SELECT 1")

        pool.close_all()
        assert pool.connection_count() == 0

        with pool.get_connection() as conn:
            assert conn.execute("SELECT 1").fetchone()[0] == 1
        assert pool.connection_count() == 1
        pool.close_all()

    def test_broken_connection_replaced(self, tmp_path: Path) -> None:
        pool = ConnectionPool(tmp_path / "test.db")
        with pool.get_connection() as conn:
            broken = conn
        broken.close()

        with pool.get_connection() as conn:
            assert conn is not broken
            assert conn.execute("SELECT 1").fetchone()[0] == 1
        pool.close_all()
