import os
import sqlite3
import threading
from contextlib import contextmanager


class Database:
    # Serializes writers sharing one SQLite file inside this process
    _lock = threading.Lock()

    @staticmethod
    @contextmanager
    def connect(path):
        """
        Open a SQLite connection that commits on success, rolls back on
        error and is always closed.
        """
        conn = sqlite3.connect(path, timeout=10)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    @staticmethod
    def ensure_parent_dir(path):
        """Create the directory holding a database file if it is missing"""
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    @staticmethod
    @contextmanager
    def write(path):
        """Exclusive write transaction: both the process lock and SQLite's."""
        with Database._lock:
            with Database.connect(path) as conn:
                conn.execute('BEGIN IMMEDIATE')
                yield conn
