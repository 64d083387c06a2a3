from __future__ import annotations

# tienda_api/db.py
import logging
import os
import sqlite3
import threading
from typing import Any, NamedTuple, Sequence, Mapping

from fastapi import Request

logger = logging.getLogger(__name__)

Params = Sequence[Any] | Mapping[str, Any]


class ExecResult(NamedTuple):
    rows_affected: int
    inserted_id: int | None


class Database:
    """
    单一 SQLite 连接的封装。启动时显式 open()，关闭时 close()。
    所有值都通过参数绑定传入；row_factory 为 Row，查询结果转为 dict。
    FastAPI 的同步路由运行在线程池中，因此对连接的访问用锁串行化。
    """

    def __init__(self, path: str):
        self.path = path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> "Database":
        if self._conn is not None:
            return self
        # 确保目录存在
        dirn = os.path.dirname(self.path) or "."
        os.makedirs(dirn, exist_ok=True)
        conn = sqlite3.connect(
            self.path,
            detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
            check_same_thread=False,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.info("connected to sqlite at %s", self.path)
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("sqlite connection closed")

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("database is not open")
        return self._conn

    def execute(self, sql: str, params: Params = ()) -> ExecResult:
        with self._lock:
            cur = self._require_conn().execute(sql, params)
            return ExecResult(rows_affected=cur.rowcount, inserted_id=cur.lastrowid)

    def query_one(self, sql: str, params: Params = ()) -> dict[str, Any] | None:
        with self._lock:
            row = self._require_conn().execute(sql, params).fetchone()
            return dict(row) if row is not None else None

    def query_all(self, sql: str, params: Params = ()) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._require_conn().execute(sql, params).fetchall()
            return [dict(r) for r in rows]

    def executescript(self, script: str) -> None:
        with self._lock:
            self._require_conn().executescript(script)


def get_db(request: Request) -> Database:
    """FastAPI dependency: the handle opened at startup lives on app.state."""
    return request.app.state.db
