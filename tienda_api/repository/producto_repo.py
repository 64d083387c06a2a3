from __future__ import annotations

import sqlite3
from typing import Any

from ..db import Database

TABLE = "productos"

# sqlite3 对超出 64 位整数的参数抛出 OverflowError，而非 sqlite3.Error
STORAGE_ERRORS = (sqlite3.Error, OverflowError)


class RepositoryError(Exception):
    """Storage failure wrapped with the operation that triggered it."""


def _wrap(context: str, err: Exception) -> RepositoryError:
    return RepositoryError(f"{context}: {err}")


def ensure_schema(db: Database):
    db.executescript(
        f"""
        CREATE TABLE IF NOT EXISTS {TABLE} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nombre TEXT NOT NULL,
            descripcion TEXT,
            precio REAL NOT NULL,
            stock INTEGER NOT NULL DEFAULT 0
        );
        """
    )


def list_all(db: Database) -> list[dict[str, Any]]:
    try:
        return db.query_all(f"SELECT * FROM {TABLE}")
    except STORAGE_ERRORS as e:
        raise _wrap("Error al obtener productos", e) from e


def get_by_id(db: Database, producto_id: int) -> dict[str, Any] | None:
    try:
        return db.query_one(f"SELECT * FROM {TABLE} WHERE id = ?", (producto_id,))
    except STORAGE_ERRORS as e:
        raise _wrap("Error al obtener producto", e) from e


def count(db: Database) -> int:
    try:
        return int(db.query_one(f"SELECT COUNT(1) AS c FROM {TABLE}")["c"])
    except STORAGE_ERRORS as e:
        raise _wrap("Error al contar productos", e) from e


def _row_values(fields: dict[str, Any]) -> tuple:
    stock = fields.get("stock")
    return (
        fields.get("nombre"),
        fields.get("descripcion"),
        fields.get("precio"),
        0 if stock is None else stock,
    )


def create(db: Database, fields: dict[str, Any]) -> dict[str, Any]:
    """
    插入一条产品记录并返回包含自增 id 的完整行。
    调用方保证 nombre / precio 存在；descripcion 缺省为 NULL，stock 缺省为 0。
    """
    try:
        res = db.execute(
            f"INSERT INTO {TABLE} (nombre, descripcion, precio, stock) VALUES (?, ?, ?, ?)",
            _row_values(fields),
        )
        row = db.query_one(f"SELECT * FROM {TABLE} WHERE id = ?", (res.inserted_id,))
    except STORAGE_ERRORS as e:
        raise _wrap("Error al crear producto", e) from e
    return row if row is not None else {"id": res.inserted_id, **fields}


def update(db: Database, producto_id: int, fields: dict[str, Any]) -> bool:
    """Full replace of nombre/descripcion/precio/stock; existence is the caller's concern."""
    try:
        res = db.execute(
            f"UPDATE {TABLE} SET nombre = ?, descripcion = ?, precio = ?, stock = ? WHERE id = ?",
            (*_row_values(fields), producto_id),
        )
    except STORAGE_ERRORS as e:
        raise _wrap("Error al actualizar producto", e) from e
    return res.rows_affected > 0


def delete(db: Database, producto_id: int) -> bool:
    try:
        res = db.execute(f"DELETE FROM {TABLE} WHERE id = ?", (producto_id,))
    except STORAGE_ERRORS as e:
        raise _wrap("Error al eliminar producto", e) from e
    return res.rows_affected > 0
