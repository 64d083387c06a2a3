#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tienda API (SQLite + FastAPI)

Commands:
  init                Create the productos / operation_log tables in the SQLite file
  serve               Run the REST API with uvicorn

Notes:
- Settings come from the environment (DB_FILE, PORT, HOST, LOG_LEVEL, CORS_ORIGINS),
  then config.yaml, then built-in defaults. Command line flags win over both.
- The store is opened once before serving; if it cannot be opened the process exits with status 1.
"""

import argparse
import logging
import os
import sqlite3
import sys

import uvicorn

from tienda_api.config import get_settings
from tienda_api.db import Database
from tienda_api.logs import ensure_log_schema
from tienda_api.repository import producto_repo

logger = logging.getLogger("tienda")


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _apply_overrides(args):
    # 供 uvicorn 进程内的 startup 钩子读取
    if args.config:
        os.environ["TIENDA_CONFIG"] = args.config
    if getattr(args, "db", None):
        os.environ["DB_FILE"] = args.db
    return get_settings()


def _init_store(db_path: str) -> int:
    try:
        with Database(db_path) as db:
            producto_repo.ensure_schema(db)
            ensure_log_schema(db)
            total = producto_repo.count(db)
    except (sqlite3.Error, OSError) as e:
        logger.error("could not open database at %s: %s", db_path, e)
        sys.exit(1)
    return total


# ---------------- Commands ----------------

def cmd_init(args):
    settings = _apply_overrides(args)
    setup_logging(settings.log_level)
    total = _init_store(settings.db_path)
    print(f"DB initialized at {settings.db_path} ({total} productos)")


def cmd_serve(args):
    settings = _apply_overrides(args)
    setup_logging(settings.log_level)
    _init_store(settings.db_path)

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Servidor corriendo en http://%s:%s", host, port)
    logger.info("Documentación: http://%s:%s/api/productos", host, port)
    uvicorn.run(
        "tienda_api.api:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


# ---------------- Entry ----------------

def main():
    parser = argparse.ArgumentParser(description="Tienda API (SQLite + FastAPI)")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create tables")
    p_init.add_argument("--db", required=False, help="SQLite file path")
    p_init.set_defaults(func=cmd_init)

    p_serve = sub.add_parser("serve", help="run the HTTP server")
    p_serve.add_argument("--db", required=False, help="SQLite file path")
    p_serve.add_argument("--host", required=False)
    p_serve.add_argument("--port", required=False, type=int)
    p_serve.add_argument("--reload", action="store_true")
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
