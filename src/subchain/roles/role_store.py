# src/subchain/roles/role_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

from ..core.ports import Clock
from ..tasks.task_codec import TaskFormatError
from .role import Role

logger = logging.getLogger(__name__)


class RoleStore:
    """
    SQLite role store.

    One row per role; the task tree is kept as the role's JSON document.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "roles.sqlite3", *, clock: Clock | None = None) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._ensure_schema()
        logger.info("RoleStore ready db=%s total=%s", self._db_path, self.count_roles())

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS roles (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    tree TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(roles)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE roles ADD COLUMN {name} {decl}")
                logger.info("RoleStore migration: added column %s", name)

            add_col("name", "TEXT NOT NULL DEFAULT ''")
            add_col("tree", "TEXT NOT NULL DEFAULT '{}'")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_roles_created ON roles(created_at)")
            conn.commit()
        finally:
            conn.close()

    def _row_to_role(self, row: sqlite3.Row) -> Role:
        role_id = str(row["id"])
        try:
            root = Role.from_json(row["tree"], clock=self._clock)
        except TaskFormatError:
            logger.error("RoleStore: stored tree of role id=%s is unreadable", role_id)
            raise
        return Role.from_tree(str(row["name"] or ""), root, role_id=role_id)

    # ---- public API ----

    def count_roles(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM roles")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def save_role(self, role: Role) -> None:
        """Insert or update the role and its whole task tree."""
        if not role.name or not role.name.strip():
            raise ValueError("role name is required")

        now = time.time()
        tree = role.to_json()

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO roles(id, name, tree, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    tree = excluded.tree,
                    updated_at = excluded.updated_at
                """,
                (role.id, role.name.strip(), tree, now, now),
            )
            conn.commit()
            logger.debug(
                "Role saved id=%s name=%s tasks=%d",
                role.id,
                role.name,
                sum(1 for _ in role.root_task.walk()),
            )
        finally:
            conn.close()

    def load_role(self, role_id: str) -> Role:
        """
        Load a role with its tree ready to use (parents reconciled, flags derived).
        Raises KeyError if there is no such role.
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM roles WHERE id = ?", (role_id,))
            row = cur.fetchone()
        finally:
            conn.close()

        if row is None:
            raise KeyError(role_id)
        return self._row_to_role(row)

    def list_roles(self) -> list[tuple[str, str]]:
        """(id, name) pairs, oldest first."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT id, name FROM roles ORDER BY created_at ASC, rowid ASC")
            return [(str(r["id"]), str(r["name"])) for r in cur.fetchall()]
        finally:
            conn.close()

    def delete_role(self, role_id: str) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM roles WHERE id = ?", (role_id,))
            conn.commit()
            deleted = cur.rowcount == 1
        finally:
            conn.close()
        if deleted:
            logger.info("Role deleted id=%s", role_id)
        return deleted
