"""
FastAPI app entry point aggregating the routers under tienda_api/routes.
Keep as `uvicorn tienda_api.api:app`.
"""
from __future__ import annotations

import logging
import sqlite3
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .db import Database
from .logs import ensure_log_schema
from .repository import producto_repo
from .routes.base import APP_NAME, APP_VERSION
from .routes.productos import envelope

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title=APP_NAME, version=APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    # 启动时按当前环境重新解析配置（测试中 DB_FILE 会被替换）
    db_path = get_settings().db_path
    db = Database(db_path)
    try:
        db.open()
        producto_repo.ensure_schema(db)
        ensure_log_schema(db)
    except (sqlite3.Error, OSError):
        logger.critical("could not open database at %s", db_path, exc_info=True)
        db.close()
        raise
    app.state.db = db


@app.on_event("shutdown")
def on_shutdown():
    db: Database | None = getattr(app.state, "db", None)
    if db is not None:
        db.close()
        app.state.db = None


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s -> %s (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # 路径存在但方法不匹配也视为未找到的路由
    if exc.status_code in (404, 405):
        return envelope(404, False, "Ruta no encontrada")
    return envelope(exc.status_code, False, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("invalid request body for %s %s: %s", request.method, request.url.path, exc.errors())
    return envelope(400, False, "Datos de entrada inválidos")


# Include routers
from .routes import base as base_routes
from .routes import productos as productos_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(productos_routes.router)
app.include_router(logs_routes.router)
