from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..db import Database, get_db
from ..logs import LogContext
from ..repository import producto_repo
from ..repository.producto_repo import RepositoryError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/productos")

NOT_FOUND = "Producto no encontrado"
INVALID_ID = "ID inválido"

# SQLite INTEGER 为有符号 64 位
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


class ProductoIn(BaseModel):
    nombre: str | None = None
    descripcion: str | None = None
    precio: float | None = Field(None, allow_inf_nan=False)
    stock: int | None = Field(None, ge=SQLITE_INT_MIN, le=SQLITE_INT_MAX)


def envelope(status_code: int, success: bool, mensaje: str, data: Any = None, error: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"success": success, "mensaje": mensaje}
    if data is not None:
        content["data"] = data
    if error is not None:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content)


def _server_error(mensaje: str, e: Exception) -> JSONResponse:
    logger.exception(mensaje)
    return envelope(500, False, mensaje, error=str(e))


def _parse_id(raw: str) -> int | None:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    if not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
        return None
    return value


@router.get("")
def api_productos_list(db: Database = Depends(get_db)):
    try:
        productos = producto_repo.list_all(db)
        return envelope(200, True, "Productos obtenidos correctamente", data=productos)
    except RepositoryError as e:
        return _server_error("Error al obtener productos", e)


@router.get("/{producto_id}")
def api_productos_get(producto_id: str, db: Database = Depends(get_db)):
    pid = _parse_id(producto_id)
    if pid is None:
        return envelope(400, False, INVALID_ID)
    try:
        producto = producto_repo.get_by_id(db, pid)
        if producto is None:
            return envelope(404, False, NOT_FOUND)
        return envelope(200, True, "Producto encontrado", data=producto)
    except RepositoryError as e:
        return _server_error("Error al obtener producto", e)


@router.post("", status_code=201)
def api_productos_create(body: ProductoIn | None = Body(None), db: Database = Depends(get_db)):
    body = body or ProductoIn()
    if not body.nombre or not body.precio:
        return envelope(400, False, "Nombre y precio son obligatorios")

    log = LogContext(db, "CREATE_PRODUCTO")
    log.set_payload(body.model_dump(exclude_unset=True))
    try:
        nuevo = producto_repo.create(db, body.model_dump())
        log.set_entity("producto", nuevo.get("id"))
        log.set_after(nuevo)
        log.write("OK")
        return envelope(201, True, "Producto creado exitosamente", data=nuevo)
    except RepositoryError as e:
        log.write("ERROR", str(e))
        return _server_error("Error al crear producto", e)


@router.put("/{producto_id}")
def api_productos_update(producto_id: str, body: ProductoIn, db: Database = Depends(get_db)):
    pid = _parse_id(producto_id)
    if pid is None:
        return envelope(400, False, INVALID_ID)

    log = LogContext(db, "UPDATE_PRODUCTO")
    log.set_entity("producto", pid)
    log.set_payload(body.model_dump(exclude_unset=True))
    try:
        existente = producto_repo.get_by_id(db, pid)
        if existente is None:
            return envelope(404, False, NOT_FOUND)
        log.set_before(existente)
        # 存在性检查之后仍可能被并发删除：按未找到处理
        if not producto_repo.update(db, pid, body.model_dump()):
            log.write("ERROR", "no rows updated")
            return envelope(404, False, NOT_FOUND)
        log.set_after(producto_repo.get_by_id(db, pid))
        log.write("OK")
        return envelope(200, True, "Producto actualizado exitosamente")
    except RepositoryError as e:
        log.write("ERROR", str(e))
        return _server_error("Error al actualizar producto", e)


@router.delete("/{producto_id}")
def api_productos_delete(producto_id: str, db: Database = Depends(get_db)):
    pid = _parse_id(producto_id)
    if pid is None:
        return envelope(400, False, INVALID_ID)

    log = LogContext(db, "DELETE_PRODUCTO")
    log.set_entity("producto", pid)
    try:
        existente = producto_repo.get_by_id(db, pid)
        if existente is None:
            return envelope(404, False, NOT_FOUND)
        log.set_before(existente)
        if not producto_repo.delete(db, pid):
            log.write("ERROR", "no rows deleted")
            return envelope(404, False, NOT_FOUND)
        log.write("OK")
        return envelope(200, True, "Producto eliminado exitosamente")
    except RepositoryError as e:
        log.write("ERROR", str(e))
        return _server_error("Error al eliminar producto", e)
